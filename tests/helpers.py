from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence

from holdem.cards import Card, parse_cards
from holdem.game import GameSession
from holdem.models import ActionType, Difficulty, RoundResult, SessionConfig


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same roll."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def scripted_deck(player: Sequence[str], ai: Sequence[str], community: Sequence[str]) -> List[Card]:
    """Deck that deals the given cards first; the rest follow in a fixed order."""
    dealt = parse_cards(list(player) + list(ai) + list(community))
    rest = [Card(rank, suit) for suit in range(1, 5) for rank in range(1, 14) if Card(rank, suit) not in dealt]
    return dealt + rest


def create_session(
    *,
    player_stack: int = 1_000,
    ai_stack: int = 1_000,
    ai_delay_ms: int = 500,
    rng: Optional[random.Random] = None,
) -> GameSession:
    return GameSession(
        SessionConfig(player_stack=player_stack, ai_stack=ai_stack, ai_delay_ms=ai_delay_ms),
        rng=rng,
    )


def start_hand(
    session: GameSession,
    difficulty: Difficulty = Difficulty.EASY,
    deck: Optional[List[Card]] = None,
    seed: int = 42,
) -> None:
    session.start_hand(difficulty, seed=seed, deck=deck)


def play_round(session: GameSession, action: ActionType) -> List[RoundResult]:
    """Submit a player action and let the AI think until it answers."""
    results = [session.submit_player_action(action)]
    ai_result = session.tick(session.config.ai_delay_ms)
    if ai_result is not None:
        results.append(ai_result)
    return results


def play_rounds(session: GameSession, actions: Iterable[ActionType]) -> List[RoundResult]:
    results: List[RoundResult] = []
    for action in actions:
        results.extend(play_round(session, action))
    return results
