from __future__ import annotations

from typing import Optional


class PokerError(Exception):
    """Base error for the hold'em core. ``code`` is what clients see."""

    code = "POKER_ERROR"

    def __init__(self, msg: str, code: Optional[str] = None) -> None:
        super().__init__(msg)
        self.msg = msg
        if code is not None:
            self.code = code


class InsufficientCards(PokerError, ValueError):
    code = "INSUFFICIENT_CARDS"


class IllegalAction(PokerError, ValueError):
    code = "ILLEGAL_ACTION"


class InvariantViolation(PokerError, RuntimeError):
    code = "INVARIANT_VIOLATION"
