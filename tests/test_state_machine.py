import pytest

from holdem.errors import IllegalAction, InvariantViolation
from holdem.game import advance, apply_bet, apply_check, apply_fold, available_actions, round_complete
from holdem.models import ActionType, Phase, RoundState, Side, revealed_count


def both_bet(state: RoundState) -> RoundState:
    state, _ = apply_bet(state, Side.PLAYER)
    state, _ = apply_bet(state, Side.AI)
    return state


def test_fresh_round_state():
    state = RoundState()
    assert state.phase == Phase.PRE_FLOP
    assert state.pot == 0
    assert state.current_bet == 0
    assert state.first_round is True
    assert state.has_used_special_action is False
    assert not state.player_acted and not state.ai_acted


def test_only_bet_is_available_in_first_round():
    state = RoundState()
    assert available_actions(state, Side.PLAYER) == [ActionType.BET]
    with pytest.raises(IllegalAction):
        apply_check(state, Side.PLAYER)
    with pytest.raises(IllegalAction):
        apply_fold(state, Side.PLAYER)


def test_check_and_fold_open_up_after_first_round():
    state = advance(both_bet(RoundState()))
    assert state.first_round is False
    assert available_actions(state, Side.PLAYER) == [ActionType.BET, ActionType.CHECK, ActionType.FOLD]


def test_special_action_is_spent_for_the_rest_of_the_hand():
    state = advance(both_bet(RoundState()))
    state = apply_check(state, Side.PLAYER)
    assert state.has_used_special_action is True
    state, _ = apply_bet(state, Side.AI)
    state = advance(state)
    assert available_actions(state, Side.PLAYER) == [ActionType.BET]
    with pytest.raises(IllegalAction):
        apply_fold(state, Side.PLAYER)


def test_bet_collects_fixed_amount_per_phase():
    state = RoundState()
    collected = []
    phases = []
    while state.phase != Phase.SHOWDOWN:
        phases.append(state.phase)
        state, player_amount = apply_bet(state, Side.PLAYER)
        state, ai_amount = apply_bet(state, Side.AI)
        assert state.current_bet == player_amount == ai_amount
        collected.append(player_amount)
        state = advance(state)
    assert phases == [Phase.PRE_FLOP, Phase.FLOP, Phase.TURN, Phase.RIVER]
    assert collected == [10, 20, 30, 40]
    assert state.pot == 200
    assert advance(state) == state


def test_advance_resets_round_flags():
    state = advance(both_bet(RoundState()))
    assert state.phase == Phase.FLOP
    assert state.current_bet == 0
    assert not state.player_acted and not state.ai_acted
    assert state.both_checked is False
    assert state.pot == 20


def test_advance_requires_both_sides_to_act():
    state, _ = apply_bet(RoundState(), Side.PLAYER)
    assert not round_complete(state)
    with pytest.raises(InvariantViolation):
        advance(state)


def test_acting_twice_in_one_round_is_rejected():
    state, _ = apply_bet(RoundState(), Side.PLAYER)
    assert available_actions(state, Side.PLAYER) == []
    with pytest.raises(IllegalAction):
        apply_bet(state, Side.PLAYER)


def test_both_checked_is_tracked():
    state = advance(both_bet(RoundState()))
    state = apply_check(state, Side.PLAYER)
    assert state.both_checked is False
    state = apply_check(state, Side.AI)
    assert state.both_checked is True
    assert state.pot == 20


def test_ai_check_does_not_spend_player_special_action():
    state = advance(both_bet(RoundState()))
    state, _ = apply_bet(state, Side.PLAYER)
    state = apply_check(state, Side.AI)
    assert state.has_used_special_action is False


def test_ai_can_never_fold():
    state = advance(both_bet(RoundState()))
    assert ActionType.FOLD not in available_actions(state, Side.AI)
    with pytest.raises(IllegalAction):
        apply_fold(state, Side.AI)


def test_fold_hands_over_the_pot():
    state = advance(both_bet(RoundState()))
    folded, award = apply_fold(state, Side.PLAYER)
    assert award == 20
    assert folded.pot == 0
    assert folded.has_used_special_action is True
    assert folded.phase == Phase.FLOP


def test_nothing_is_available_at_showdown():
    state = RoundState(phase=Phase.SHOWDOWN)
    assert available_actions(state, Side.PLAYER) == []
    assert available_actions(state, Side.AI) == []


def test_revealed_count_by_phase():
    assert [revealed_count(phase) for phase in Phase] == [0, 3, 4, 5, 5]
