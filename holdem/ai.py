from __future__ import annotations

import random
from typing import Optional, Tuple

from .models import ActionType, Difficulty, Phase, fixed_bet


_RNG = random.Random()
_HARD_CHECK_PROBABILITY = 0.5


def calculate_ai_action(
    phase: Phase,
    player_acted: bool,
    difficulty: Optional[Difficulty],
    rng: Optional[random.Random] = None,
) -> Tuple[ActionType, int]:
    """Pick the house action for this betting round. The house never folds.

    Easy and Medium always bet the phase amount. Hard lets a round go by with a
    check half of the time, but only once the player has already acted.
    """
    rng = rng or _RNG
    amount = fixed_bet(phase)

    if difficulty == Difficulty.HARD and player_acted:
        if rng.random() < _HARD_CHECK_PROBABILITY:
            return ActionType.CHECK, 0

    return ActionType.BET, amount
