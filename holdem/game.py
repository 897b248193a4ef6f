from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .ai import calculate_ai_action
from .cards import Card, cards_to_labels, deal_hand, new_shuffled_deck
from .errors import IllegalAction, InvariantViolation
from .evaluator import HandResult, compare_hand_results, describe_strength, evaluate_best_hand
from .models import (
    NEXT_PHASE,
    ActionType,
    ChipStacks,
    Difficulty,
    HandOutcome,
    Phase,
    RoundResult,
    RoundState,
    SessionConfig,
    Side,
    Snapshot,
    fixed_bet,
    revealed_count,
)

LOGGER = logging.getLogger("holdem.game")

# The functions below are the betting state machine: each takes a RoundState
# and returns a new one. GameSession owns the chips, cards and AI pacing.


def available_actions(state: RoundState, side: Side) -> List[ActionType]:
    if state.phase == Phase.SHOWDOWN:
        return []
    acted = state.player_acted if side == Side.PLAYER else state.ai_acted
    if acted:
        return []
    if side == Side.AI:
        # The house may pass on a round but never folds.
        return [ActionType.BET, ActionType.CHECK]
    legal = [ActionType.BET]
    if not state.first_round and not state.has_used_special_action:
        legal.extend([ActionType.CHECK, ActionType.FOLD])
    return legal


def _require(state: RoundState, side: Side, action: ActionType) -> None:
    if action not in available_actions(state, side):
        raise IllegalAction(f"{action.value} is not available to {side.value} during {state.phase.value}")


def _acted(side: Side) -> Dict[str, bool]:
    return {"player_acted": True} if side == Side.PLAYER else {"ai_acted": True}


def apply_bet(state: RoundState, side: Side) -> Tuple[RoundState, int]:
    _require(state, side, ActionType.BET)
    amount = fixed_bet(state.phase)
    return replace(state, pot=state.pot + amount, current_bet=amount, **_acted(side)), amount


def apply_check(state: RoundState, side: Side) -> RoundState:
    _require(state, side, ActionType.CHECK)
    player_checked = state.player_checked or side == Side.PLAYER
    ai_checked = state.ai_checked or side == Side.AI
    changes: Dict[str, bool] = dict(
        _acted(side),
        player_checked=player_checked,
        ai_checked=ai_checked,
        both_checked=player_checked and ai_checked,
    )
    if side == Side.PLAYER:
        changes["has_used_special_action"] = True
    return replace(state, **changes)


def apply_fold(state: RoundState, side: Side) -> Tuple[RoundState, int]:
    """Fold the hand. Returns the new state and the pot the opponent collects."""
    _require(state, side, ActionType.FOLD)
    return replace(state, pot=0, has_used_special_action=True, **_acted(side)), state.pot


def round_complete(state: RoundState) -> bool:
    return state.phase != Phase.SHOWDOWN and state.player_acted and state.ai_acted


def advance(state: RoundState) -> RoundState:
    """Move to the next phase once both sides have acted this round."""
    if state.phase == Phase.SHOWDOWN:
        return state
    if not round_complete(state):
        raise InvariantViolation(f"Cannot leave {state.phase.value} before both sides act")
    return replace(
        state,
        phase=NEXT_PHASE[state.phase],
        current_bet=0,
        player_acted=False,
        ai_acted=False,
        both_checked=False,
        player_checked=False,
        ai_checked=False,
        first_round=False,
    )


@dataclass
class HandContext:
    # Everything about the hand in progress; dropped when the next one starts.
    hand_id: str
    difficulty: Difficulty
    player_hole: List[Card]
    ai_hole: List[Card]
    community: List[Card]
    deck: List[Card]
    state: RoundState = field(default_factory=RoundState)
    contributions: Dict[Side, int] = field(default_factory=lambda: {Side.PLAYER: 0, Side.AI: 0})
    outcome: Optional[HandOutcome] = None
    player_result: Optional[HandResult] = None
    ai_result: Optional[HandResult] = None
    show_ai_cards: bool = False

    @property
    def hand_over(self) -> bool:
        return self.outcome is not None


class GameSession:
    """One heads-up game between the player and the house AI.

    Chip stacks carry over from hand to hand until either side drops to zero
    or below. After the player acts the AI "thinks" for ``ai_delay_ms``; the
    driving loop calls :meth:`tick` to let that time pass.
    """

    def __init__(self, config: Optional[SessionConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or SessionConfig()
        self.rng = rng
        self.stacks = ChipStacks(player=self.config.player_stack, ai=self.config.ai_stack)
        self.hand: Optional[HandContext] = None
        self.hand_counter = 0
        self.game_over = False
        self.waiting_for_ai = False
        self.ai_countdown_ms = 0
        self.message = "Welcome to Texas Hold'em!"

    # Hand lifecycle --------------------------------------------------

    def start_hand(
        self,
        difficulty: Union[Difficulty, str],
        seed: Optional[int] = None,
        deck: Optional[Sequence[Card]] = None,
    ) -> RoundState:
        if self.game_over:
            raise IllegalAction("Game is over; start a new session", code="GAME_OVER")
        try:
            level = Difficulty(difficulty.strip().upper() if isinstance(difficulty, str) else difficulty)
        except ValueError:
            raise IllegalAction(f"Unknown difficulty {difficulty!r}", code="BAD_DIFFICULTY") from None
        if self.hand is not None and not self.hand.hand_over:
            self.abandon_hand()

        if deck is None:
            deck = new_shuffled_deck(seed)
        player_hole, ai_hole, community, remaining = deal_hand(deck)

        self.hand_counter += 1
        self.hand = HandContext(
            hand_id=f"H-{self.hand_counter:05d}",
            difficulty=level,
            player_hole=player_hole,
            ai_hole=ai_hole,
            community=community,
            deck=remaining,
        )
        self.waiting_for_ai = False
        self.ai_countdown_ms = 0
        if self.hand_counter == 1:
            self.message = "Game on! You bet first."
        else:
            self.message = f"New hand! Your chips: {self.stacks.player}, AI chips: {self.stacks.ai}"
        LOGGER.info(
            "Hand %s started (difficulty=%s, stacks player=%s ai=%s)",
            self.hand.hand_id,
            self.hand.difficulty.value,
            self.stacks.player,
            self.stacks.ai,
        )
        return self.hand.state

    def abandon_hand(self) -> None:
        """Drop the hand in progress. Unsettled bets go back to their owners."""
        ctx = self.hand
        if ctx is None:
            return
        if ctx.state.pot > 0:
            self.stacks.player += ctx.contributions[Side.PLAYER]
            self.stacks.ai += ctx.contributions[Side.AI]
        LOGGER.info("Hand %s abandoned", ctx.hand_id)
        self.hand = None
        self.waiting_for_ai = False
        self.ai_countdown_ms = 0

    # Actions ---------------------------------------------------------

    def legal_actions(self) -> List[ActionType]:
        ctx = self.hand
        if ctx is None or ctx.hand_over or self.waiting_for_ai or self.game_over:
            return []
        return available_actions(ctx.state, Side.PLAYER)

    def submit_player_action(self, action: Union[ActionType, str]) -> RoundResult:
        try:
            action = ActionType(action.upper() if isinstance(action, str) else action)
        except ValueError:
            return self._result(ok=False, message=f"Unknown action {action!r}", error=IllegalAction.code)

        ctx = self.hand
        try:
            self._ensure_player_turn()
            events = self._with_invariants(lambda: self._apply_player_action(action))
        except IllegalAction as exc:
            LOGGER.info("Rejected %s for hand %s: %s", action.value, ctx.hand_id if ctx else None, exc.msg)
            return self._result(ok=False, message=exc.msg, error=exc.code)
        return self._result(ok=True, message=self.message, events=events)

    def tick(self, elapsed_ms: int = 0) -> Optional[RoundResult]:
        """Let ``elapsed_ms`` of AI thinking time pass; the AI acts once it runs out."""
        if not self.waiting_for_ai:
            return None
        self.ai_countdown_ms -= elapsed_ms
        if self.ai_countdown_ms > 0:
            return None
        return self.perform_ai_action()

    def perform_ai_action(self) -> RoundResult:
        self.waiting_for_ai = False
        self.ai_countdown_ms = 0
        ctx = self.hand
        if self.game_over:
            return self._result(ok=False, message="Game is over", error="GAME_OVER")
        if ctx is None or ctx.hand_over or ctx.state.ai_acted:
            return self._result(ok=False, message="AI has nothing to act on", error="NO_AI_ACTION")
        if not ctx.state.player_acted:
            return self._result(ok=False, message="The player acts first each round", error="NOT_AI_TURN")
        events = self._with_invariants(lambda: self._apply_ai_action(ctx))
        return self._result(ok=True, message=self.message, events=events)

    def _ensure_player_turn(self) -> None:
        ctx = self.hand
        if self.game_over:
            raise IllegalAction("Game is over", code="GAME_OVER")
        if ctx is None:
            raise IllegalAction("No hand in progress", code="NO_HAND")
        if ctx.hand_over:
            raise IllegalAction("Hand is over; start the next hand", code="HAND_OVER")
        if self.waiting_for_ai:
            raise IllegalAction("Waiting for the AI to act", code="WAITING_FOR_AI")

    def _apply_player_action(self, action: ActionType) -> List[Dict[str, object]]:
        ctx = self.hand
        assert ctx is not None
        events: List[Dict[str, object]] = []

        if action == ActionType.BET:
            ctx.state, amount = apply_bet(ctx.state, Side.PLAYER)
            self._pay(ctx, Side.PLAYER, amount)
            self.message = f"You bet {amount} chips"
            events.append({"ev": "BET", "side": Side.PLAYER.value, "amount": amount})
        elif action == ActionType.CHECK:
            ctx.state = apply_check(ctx.state, Side.PLAYER)
            self.message = "You checked"
            events.append({"ev": "CHECK", "side": Side.PLAYER.value})
        elif action == ActionType.FOLD:
            ctx.state, award = apply_fold(ctx.state, Side.PLAYER)
            self.stacks.ai += award
            ctx.outcome = HandOutcome.PLAYER_FOLDED
            ctx.show_ai_cards = True
            self.message = f"You folded; the AI takes the pot of {award}"
            events.append({"ev": "FOLD", "side": Side.PLAYER.value})
            events.append({"ev": "POT_AWARD", "side": Side.AI.value, "amount": award})
            LOGGER.info("Hand %s: player folded, AI collects %s", ctx.hand_id, award)
        else:
            raise IllegalAction(f"Unsupported action {action}")

        events.extend(self._after_transfer())
        if not ctx.hand_over:
            self.waiting_for_ai = True
            self.ai_countdown_ms = self.config.ai_delay_ms
        return events

    def _apply_ai_action(self, ctx: HandContext) -> List[Dict[str, object]]:
        events: List[Dict[str, object]] = []
        action, _ = calculate_ai_action(ctx.state.phase, ctx.state.player_acted, ctx.difficulty, self.rng)
        if action == ActionType.CHECK:
            ctx.state = apply_check(ctx.state, Side.AI)
            self._say("AI checks")
            events.append({"ev": "CHECK", "side": Side.AI.value})
        else:
            ctx.state, amount = apply_bet(ctx.state, Side.AI)
            self._pay(ctx, Side.AI, amount)
            self._say(f"AI bets {amount} chips")
            events.append({"ev": "BET", "side": Side.AI.value, "amount": amount})
        LOGGER.debug("Hand %s: AI %s during %s", ctx.hand_id, action.value, ctx.state.phase.value)

        events.extend(self._after_transfer())
        if not ctx.hand_over and round_complete(ctx.state):
            events.extend(self._advance(ctx))
        return events

    def _pay(self, ctx: HandContext, side: Side, amount: int) -> None:
        # Stacks may go negative; the game-over check settles that afterwards.
        if side == Side.PLAYER:
            self.stacks.player -= amount
        else:
            self.stacks.ai -= amount
        ctx.contributions[side] += amount

    def _advance(self, ctx: HandContext) -> List[Dict[str, object]]:
        events: List[Dict[str, object]] = []
        if ctx.state.both_checked:
            self._say("Both sides checked; moving on")
        ctx.state = advance(ctx.state)
        phase = ctx.state.phase
        labels = cards_to_labels(ctx.community)
        if phase == Phase.FLOP:
            self._say("Flop! Three community cards revealed.")
            events.append({"ev": "FLOP", "cards": labels[:3]})
        elif phase == Phase.TURN:
            self._say("Turn! The fourth community card is revealed.")
            events.append({"ev": "TURN", "card": labels[3]})
        elif phase == Phase.RIVER:
            self._say("River! The fifth community card is revealed.")
            events.append({"ev": "RIVER", "card": labels[4]})
        else:
            self._say("Showdown!")
            events.extend(self._resolve_showdown(ctx))
        return events

    def _resolve_showdown(self, ctx: HandContext) -> List[Dict[str, object]]:
        events: List[Dict[str, object]] = []
        ctx.player_result = evaluate_best_hand(ctx.player_hole, ctx.community)
        ctx.ai_result = evaluate_best_hand(ctx.ai_hole, ctx.community)
        ctx.show_ai_cards = True
        board = cards_to_labels(ctx.community)
        for side, hole, result in (
            (Side.PLAYER, ctx.player_hole, ctx.player_result),
            (Side.AI, ctx.ai_hole, ctx.ai_result),
        ):
            events.append(
                {
                    "ev": "SHOWDOWN",
                    "side": side.value,
                    "hand": cards_to_labels(hole),
                    "board": board,
                    "rank": describe_strength(result.strength),
                }
            )

        pot = ctx.state.pot
        player_name = describe_strength(ctx.player_result.strength)
        ai_name = describe_strength(ctx.ai_result.strength)
        comparison = compare_hand_results(ctx.player_result, ctx.ai_result)
        if comparison > 0:
            ctx.outcome = HandOutcome.PLAYER_WINS
            self.stacks.player += pot
            self._say(f"You win! {player_name} beats {ai_name}")
            events.append({"ev": "POT_AWARD", "side": Side.PLAYER.value, "amount": pot})
        elif comparison < 0:
            ctx.outcome = HandOutcome.AI_WINS
            self.stacks.ai += pot
            self._say(f"AI wins! {ai_name} beats {player_name}")
            events.append({"ev": "POT_AWARD", "side": Side.AI.value, "amount": pot})
        else:
            # Odd chip goes to the player.
            ctx.outcome = HandOutcome.SPLIT
            share, remainder = divmod(pot, 2)
            self.stacks.player += share + remainder
            self.stacks.ai += share
            self._say(f"Split pot! Both sides hold {player_name}")
            events.append({"ev": "POT_AWARD", "side": Side.PLAYER.value, "amount": share + remainder})
            events.append({"ev": "POT_AWARD", "side": Side.AI.value, "amount": share})

        ctx.state = replace(ctx.state, pot=0)
        LOGGER.info(
            "Hand %s showdown: %s (player %s vs ai %s, pot %s)",
            ctx.hand_id,
            ctx.outcome.value,
            player_name,
            ai_name,
            pot,
        )
        events.extend(self._after_transfer())
        return events

    def _after_transfer(self) -> List[Dict[str, object]]:
        ctx = self.hand
        if ctx is not None and ctx.state.pot < 0:
            raise InvariantViolation(f"Negative pot {ctx.state.pot} in hand {ctx.hand_id}")
        if self.game_over or not self.stacks.busted():
            return []
        self.game_over = True
        self.waiting_for_ai = False
        self.ai_countdown_ms = 0
        if ctx is not None and not ctx.hand_over:
            # A busting bet ends the hand; the pot stays on the table unsettled.
            ctx.outcome = HandOutcome.BANKRUPT
        loser = Side.PLAYER if self.stacks.player <= 0 else Side.AI
        self._say(f"Your chips: {self.stacks.player}, AI chips: {self.stacks.ai}. Game over!")
        LOGGER.info("Game over: %s out of chips (player=%s ai=%s)", loser.value, self.stacks.player, self.stacks.ai)
        return [{"ev": "GAME_OVER", "loser": loser.value}]

    def _with_invariants(self, step: Callable[[], List[Dict[str, object]]]) -> List[Dict[str, object]]:
        try:
            return step()
        except InvariantViolation:
            hand_id = self.hand.hand_id if self.hand else None
            LOGGER.exception("Aborting hand %s after invariant violation", hand_id)
            self.hand = None
            self.waiting_for_ai = False
            self.ai_countdown_ms = 0
            raise

    def _say(self, text: str) -> None:
        self.message = f"{self.message}\n{text}" if self.message else text

    # Snapshots -------------------------------------------------------

    def next_actor(self) -> Optional[Side]:
        ctx = self.hand
        if ctx is None or ctx.hand_over:
            return None
        if self.waiting_for_ai or (ctx.state.player_acted and not ctx.state.ai_acted):
            return Side.AI
        return Side.PLAYER

    def snapshot(self) -> Snapshot:
        ctx = self.hand
        state = ctx.state if ctx else RoundState()
        return Snapshot(
            hand_id=ctx.hand_id if ctx else None,
            phase=state.phase,
            pot=state.pot,
            current_bet=state.current_bet,
            player_stack=self.stacks.player,
            ai_stack=self.stacks.ai,
            next_actor=self.next_actor(),
            legal=self.legal_actions(),
            community=cards_to_labels(ctx.community[: revealed_count(state.phase)]) if ctx else [],
            player_hole=cards_to_labels(ctx.player_hole) if ctx else [],
            ai_hole=cards_to_labels(ctx.ai_hole) if ctx and ctx.show_ai_cards else None,
            waiting_for_ai=self.waiting_for_ai,
            message=self.message,
            hand_over=ctx.hand_over if ctx else False,
            game_over=self.game_over,
            difficulty=ctx.difficulty if ctx else None,
            outcome=ctx.outcome if ctx else None,
            player_result=ctx.player_result.to_payload() if ctx and ctx.player_result else None,
            ai_result=ctx.ai_result.to_payload() if ctx and ctx.ai_result else None,
        )

    def _result(
        self,
        ok: bool,
        message: str,
        error: Optional[str] = None,
        events: Optional[List[Dict[str, object]]] = None,
    ) -> RoundResult:
        ctx = self.hand
        state = ctx.state if ctx else RoundState()
        return RoundResult(
            ok=ok,
            message=message,
            phase=state.phase,
            pot=state.pot,
            player_stack=self.stacks.player,
            ai_stack=self.stacks.ai,
            hand_over=ctx.hand_over if ctx else False,
            game_over=self.game_over,
            error=error,
            events=events or [],
        )
