from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Phase(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


class ActionType(str, Enum):
    BET = "BET"
    CHECK = "CHECK"
    FOLD = "FOLD"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Side(str, Enum):
    PLAYER = "PLAYER"
    AI = "AI"


class HandOutcome(str, Enum):
    PLAYER_WINS = "PLAYER_WINS"
    AI_WINS = "AI_WINS"
    SPLIT = "SPLIT"
    PLAYER_FOLDED = "PLAYER_FOLDED"
    BANKRUPT = "BANKRUPT"


FIXED_BETS: Dict[Phase, int] = {
    Phase.PRE_FLOP: 10,
    Phase.FLOP: 20,
    Phase.TURN: 30,
    Phase.RIVER: 40,
    Phase.SHOWDOWN: 0,
}

NEXT_PHASE: Dict[Phase, Phase] = {
    Phase.PRE_FLOP: Phase.FLOP,
    Phase.FLOP: Phase.TURN,
    Phase.TURN: Phase.RIVER,
    Phase.RIVER: Phase.SHOWDOWN,
    Phase.SHOWDOWN: Phase.SHOWDOWN,
}

_REVEALED: Dict[Phase, int] = {
    Phase.PRE_FLOP: 0,
    Phase.FLOP: 3,
    Phase.TURN: 4,
    Phase.RIVER: 5,
    Phase.SHOWDOWN: 5,
}


def fixed_bet(phase: Phase) -> int:
    return FIXED_BETS[phase]


def revealed_count(phase: Phase) -> int:
    """How many community cards the player may see during ``phase``."""
    return _REVEALED[phase]


@dataclass
class SessionConfig:
    player_stack: int = 200
    ai_stack: int = 100
    ai_delay_ms: int = 500


@dataclass(frozen=True)
class RoundState:
    phase: Phase = Phase.PRE_FLOP
    pot: int = 0
    current_bet: int = 0
    player_acted: bool = False
    ai_acted: bool = False
    both_checked: bool = False
    first_round: bool = True
    has_used_special_action: bool = False
    # Individual checks this round, used to derive both_checked.
    player_checked: bool = False
    ai_checked: bool = False


@dataclass
class ChipStacks:
    player: int
    ai: int

    def busted(self) -> bool:
        return self.player <= 0 or self.ai <= 0


@dataclass
class RoundResult:
    ok: bool
    message: str
    phase: Phase
    pot: int
    player_stack: int
    ai_stack: int
    hand_over: bool = False
    game_over: bool = False
    error: Optional[str] = None
    events: List[Dict[str, object]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, object]:
        return {
            "ok": self.ok,
            "message": self.message,
            "phase": self.phase.value,
            "pot": self.pot,
            "player_stack": self.player_stack,
            "ai_stack": self.ai_stack,
            "hand_over": self.hand_over,
            "game_over": self.game_over,
            "error": self.error,
            "events": list(self.events),
        }


@dataclass
class Snapshot:
    hand_id: Optional[str]
    phase: Phase
    pot: int
    current_bet: int
    player_stack: int
    ai_stack: int
    next_actor: Optional[Side]
    legal: List[ActionType]
    community: List[str]
    player_hole: List[str]
    ai_hole: Optional[List[str]]
    waiting_for_ai: bool
    message: str
    hand_over: bool
    game_over: bool
    difficulty: Optional[Difficulty] = None
    outcome: Optional[HandOutcome] = None
    player_result: Optional[Dict[str, object]] = None
    ai_result: Optional[Dict[str, object]] = None

    def to_payload(self) -> Dict[str, object]:
        return {
            "hand_id": self.hand_id,
            "phase": self.phase.value,
            "pot": self.pot,
            "current_bet": self.current_bet,
            "bet_amount": fixed_bet(self.phase),
            "you": {"hole": list(self.player_hole), "stack": self.player_stack},
            "ai": {"hole": self.ai_hole, "stack": self.ai_stack},
            "community": list(self.community),
            "next_actor": self.next_actor.value if self.next_actor else None,
            "legal": [action.value for action in self.legal],
            "waiting_for_ai": self.waiting_for_ai,
            "message": self.message,
            "hand_over": self.hand_over,
            "game_over": self.game_over,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "outcome": self.outcome.value if self.outcome else None,
            "player_result": self.player_result,
            "ai_result": self.ai_result,
        }
