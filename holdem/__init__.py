"""Heads-up fixed-bet Texas Hold'em: hand evaluator, betting state machine and house AI."""

from .ai import calculate_ai_action
from .cards import Card, RANKS, SUITS, deal, deal_hand, new_shuffled_deck, parse_cards
from .errors import IllegalAction, InsufficientCards, InvariantViolation, PokerError
from .evaluator import HandResult, HandStrength, compare_hand_results, evaluate_best_hand, evaluate_five_card_hand
from .game import GameSession, HandContext, advance, available_actions
from .models import ActionType, Difficulty, Phase, RoundResult, RoundState, SessionConfig, Side, Snapshot
from .util import combinations

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "deal",
    "deal_hand",
    "new_shuffled_deck",
    "parse_cards",
    "combinations",
    "HandResult",
    "HandStrength",
    "compare_hand_results",
    "evaluate_best_hand",
    "evaluate_five_card_hand",
    "calculate_ai_action",
    "GameSession",
    "HandContext",
    "advance",
    "available_actions",
    "ActionType",
    "Difficulty",
    "Phase",
    "RoundResult",
    "RoundState",
    "SessionConfig",
    "Side",
    "Snapshot",
    "PokerError",
    "IllegalAction",
    "InsufficientCards",
    "InvariantViolation",
]
