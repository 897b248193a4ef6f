from __future__ import annotations

import functools
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from .cards import Card
from .errors import InsufficientCards
from .util import combinations

LOGGER = logging.getLogger("holdem.evaluator")


class HandStrength(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


@dataclass(frozen=True)
class HandResult:
    strength: HandStrength
    keys: Tuple[int, ...]
    # Set when fewer than five cards were available.
    partial: bool = field(default=False, compare=False)

    def to_payload(self) -> dict:
        return {"rank": describe_strength(self.strength), "keys": list(self.keys)}


def describe_strength(strength: HandStrength) -> str:
    if strength == HandStrength.STRAIGHT_FLUSH:
        return "straight_flush"
    if strength == HandStrength.FOUR_OF_A_KIND:
        return "four_of_a_kind"
    if strength == HandStrength.FULL_HOUSE:
        return "full_house"
    if strength == HandStrength.FLUSH:
        return "flush"
    if strength == HandStrength.STRAIGHT:
        return "straight"
    if strength == HandStrength.THREE_OF_A_KIND:
        return "three_of_a_kind"
    if strength == HandStrength.TWO_PAIR:
        return "two_pair"
    if strength == HandStrength.ONE_PAIR:
        return "pair"
    return "high_card"


def compare_hand_results(first: HandResult, second: HandResult) -> int:
    """Return 1, 0 or -1 as ``first`` beats, ties or loses to ``second``.

    Keys are compared over their common prefix only, so two results whose
    keys differ just in length are treated as a tie.
    """
    if first.strength != second.strength:
        return 1 if first.strength > second.strength else -1
    for left, right in zip(first.keys, second.keys):
        if left != right:
            return 1 if left > right else -1
    return 0


hand_result_key = functools.cmp_to_key(compare_hand_results)


def evaluate_best_hand(hole: Sequence[Card], community: Sequence[Card]) -> HandResult:
    """Best five-card hand out of the hole cards plus the board."""
    cards = list(hole) + list(community)
    if len(cards) < 5:
        error = InsufficientCards(f"Need 5 cards to evaluate, got {len(cards)}")
        LOGGER.warning("%s; scoring as high card", error)
        return HandResult(HandStrength.HIGH_CARD, tuple(_ranks_descending(cards)), partial=True)

    return max((evaluate_five_card_hand(combo) for combo in combinations(cards, 5)), key=hand_result_key)


def evaluate_five_card_hand(cards: Sequence[Card]) -> HandResult:
    if len(cards) != 5:
        raise ValueError(f"Expected 5 cards, got {len(cards)}")

    ranks = _ranks_descending(cards)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(ranks)

    # Highest count first, then highest rank within the same count.
    grouped = sorted(Counter(ranks).items(), key=lambda item: (item[1], item[0]), reverse=True)
    counts = [count for _, count in grouped]

    if straight_high is not None and is_flush:
        return HandResult(HandStrength.STRAIGHT_FLUSH, (straight_high,))
    if counts[0] == 4:
        quad = grouped[0][0]
        kicker = max(rank for rank in ranks if rank != quad)
        return HandResult(HandStrength.FOUR_OF_A_KIND, (quad, kicker))
    if counts[0] == 3 and counts[1] == 2:
        return HandResult(HandStrength.FULL_HOUSE, (grouped[0][0], grouped[1][0]))
    if is_flush:
        return HandResult(HandStrength.FLUSH, tuple(ranks))
    if straight_high is not None:
        return HandResult(HandStrength.STRAIGHT, (straight_high,))
    if counts[0] == 3:
        trips = grouped[0][0]
        kickers = [rank for rank in ranks if rank != trips][:2]
        return HandResult(HandStrength.THREE_OF_A_KIND, (trips, *kickers))
    if counts[0] == 2 and counts[1] == 2:
        pair_high, pair_low = grouped[0][0], grouped[1][0]
        kicker = max(rank for rank in ranks if rank not in (pair_high, pair_low))
        return HandResult(HandStrength.TWO_PAIR, (pair_high, pair_low, kicker))
    if counts[0] == 2:
        pair = grouped[0][0]
        kickers = [rank for rank in ranks if rank != pair][:3]
        return HandResult(HandStrength.ONE_PAIR, (pair, *kickers))
    return HandResult(HandStrength.HIGH_CARD, tuple(ranks))


def _ranks_descending(cards: Sequence[Card]) -> List[int]:
    return sorted((card.rank for card in cards), reverse=True)


def _straight_high(ranks: Sequence[int]) -> Optional[int]:
    # Ace is rank 1, so A-2-3-4-5 is just the lowest run; nothing wraps past K.
    ordered = sorted(set(ranks))
    best = None
    for idx in range(len(ordered) - 4):
        if ordered[idx + 4] - ordered[idx] == 4:
            best = ordered[idx + 4]
    return best

