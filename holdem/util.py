from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def combinations(items: Sequence[T], k: int) -> Iterator[Tuple[T, ...]]:
    """Yield every k-element subset of ``items``, preserving input order."""
    if k < 0:
        raise ValueError("k must be non-negative")

    def _build(start: int, current: List[T]) -> Iterator[Tuple[T, ...]]:
        if len(current) == k:
            yield tuple(current)
            return
        # Stop early once there are too few items left to fill the subset.
        for idx in range(start, len(items) - (k - len(current)) + 1):
            current.append(items[idx])
            yield from _build(idx + 1, current)
            current.pop()

    return _build(0, [])
