import logging

import pytest

from holdem.cards import new_shuffled_deck, parse_cards
from holdem.evaluator import (
    HandResult,
    HandStrength,
    compare_hand_results,
    describe_strength,
    evaluate_best_hand,
    evaluate_five_card_hand,
    hand_result_key,
)
from holdem.util import combinations


def five(*labels):
    return evaluate_five_card_hand(parse_cards(labels))


def test_evaluate_identifies_all_hand_categories():
    cases = [
        (HandStrength.STRAIGHT_FLUSH, ["9h", "Th", "Jh", "Qh", "Kh"]),
        (HandStrength.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd"]),
        (HandStrength.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s"]),
        (HandStrength.FLUSH, ["Ah", "Jh", "9h", "6h", "2h"]),
        (HandStrength.STRAIGHT, ["9h", "8d", "7c", "6s", "5h"]),
        (HandStrength.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js"]),
        (HandStrength.TWO_PAIR, ["7h", "7d", "4s", "4c", "As"]),
        (HandStrength.ONE_PAIR, ["6h", "6s", "Qh", "8d", "4c"]),
        (HandStrength.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected, labels in cases:
        assert five(*labels).strength == expected, f"labels={labels}"


def test_straight_flush_keyed_by_top_card():
    result = five("9s", "Ts", "Js", "Qs", "Ks")
    assert result == HandResult(HandStrength.STRAIGHT_FLUSH, (13,))


def test_wheel_is_five_high_straight():
    result = five("As", "2d", "3c", "4s", "5h")
    assert result.strength == HandStrength.STRAIGHT
    assert result.keys == (5,)


def test_ace_never_plays_high_in_a_straight():
    result = five("Ts", "Jd", "Qc", "Ks", "Ah")
    assert result.strength == HandStrength.HIGH_CARD
    assert result.keys == (13, 12, 11, 10, 1)


def test_four_of_a_kind_keeps_quad_rank_and_kicker():
    assert five("7s", "7h", "7d", "7c", "Kd").keys == (7, 13)
    assert five("7s", "7h", "7d", "7c", "Ad").keys == (7, 1)


def test_tie_break_keys_per_category():
    assert five("Qc", "Qd", "Qs", "9h", "9s").keys == (12, 9)
    assert five("8h", "8d", "8s", "Qd", "2s").keys == (8, 12, 2)
    assert five("7h", "7d", "4s", "4c", "Ks").keys == (7, 4, 13)
    assert five("6h", "6s", "Qh", "8d", "4c").keys == (6, 12, 8, 4)
    assert five("Kh", "Jh", "9h", "6h", "2h").keys == (13, 11, 9, 6, 2)


def test_best_hand_picks_higher_trips_for_full_house():
    result = evaluate_best_hand(parse_cards(["Ks", "Kh"]), parse_cards(["Kd", "2s", "2h", "2d", "9c"]))
    assert result == HandResult(HandStrength.FULL_HOUSE, (13, 2))


def test_best_hand_uses_longest_run_top():
    result = evaluate_best_hand(parse_cards(["3s", "4h"]), parse_cards(["5d", "6c", "7s", "8h", "9d"]))
    assert result == HandResult(HandStrength.STRAIGHT, (9,))


def test_best_two_pair_kicker_treats_ace_as_low():
    result = evaluate_best_hand(parse_cards(["Ks", "Kh"]), parse_cards(["9d", "9c", "4s", "4h", "Ad"]))
    assert result == HandResult(HandStrength.TWO_PAIR, (13, 9, 4))


def test_suited_ace_king_queen_jack_ten_is_only_a_flush():
    result = evaluate_best_hand(parse_cards(["As", "Ks"]), parse_cards(["Qs", "Js", "Ts", "2h", "3d"]))
    assert result.strength == HandStrength.FLUSH
    assert result.keys == (13, 12, 11, 10, 1)


def test_best_hand_is_at_least_every_five_card_subset():
    for seed in range(25):
        deck = new_shuffled_deck(seed=seed)
        hole, community = deck[:2], deck[2:7]
        best = evaluate_best_hand(hole, community)
        subsets = list(combinations(hole + community, 5))
        assert len(subsets) == 21
        for subset in subsets:
            assert compare_hand_results(best, evaluate_five_card_hand(subset)) >= 0


def test_best_hand_is_the_top_of_the_sorted_subsets():
    deck = new_shuffled_deck(seed=77)
    hole, community = deck[:2], deck[2:7]
    ranked = sorted((evaluate_five_card_hand(subset) for subset in combinations(hole + community, 5)), key=hand_result_key)
    assert compare_hand_results(evaluate_best_hand(hole, community), ranked[-1]) == 0


def test_evaluation_is_repeatable():
    deck = new_shuffled_deck(seed=314)
    first = evaluate_best_hand(deck[:2], deck[2:7])
    for _ in range(5):
        assert evaluate_best_hand(deck[:2], deck[2:7]) == first


def test_compare_orders_by_category_then_keys():
    flush = five("Ah", "Jh", "9h", "6h", "2h")
    straight = five("9h", "8d", "7c", "6s", "5h")
    pair_kings = five("Kh", "Kd", "Qc", "Js", "8h")
    pair_kings_lower_kicker = five("Ks", "Kc", "Qd", "Jh", "7h")

    assert compare_hand_results(flush, straight) == 1
    assert compare_hand_results(straight, flush) == -1
    assert compare_hand_results(pair_kings, pair_kings_lower_kicker) == 1
    assert compare_hand_results(pair_kings, five("Kc", "Ks", "Qh", "Jd", "8c")) == 0


def test_compare_is_a_total_preorder():
    deck = new_shuffled_deck(seed=2024)
    hands = [evaluate_five_card_hand(deck[idx : idx + 5]) for idx in range(0, 50, 5)]
    hands.append(hands[0])

    for a in hands:
        assert compare_hand_results(a, a) == 0
        for b in hands:
            assert compare_hand_results(a, b) == -compare_hand_results(b, a)
            for c in hands:
                if compare_hand_results(a, b) >= 0 and compare_hand_results(b, c) >= 0:
                    assert compare_hand_results(a, c) >= 0

    ordered = sorted(hands, key=hand_result_key)
    for lower, higher in zip(ordered, ordered[1:]):
        assert compare_hand_results(lower, higher) <= 0


def test_keys_of_different_length_with_equal_prefix_tie():
    short = HandResult(HandStrength.FLUSH, (13, 12))
    long = HandResult(HandStrength.FLUSH, (13, 12, 5))
    assert compare_hand_results(short, long) == 0
    assert compare_hand_results(long, short) == 0


def test_fewer_than_five_cards_degrades_to_high_card(caplog):
    with caplog.at_level(logging.WARNING, logger="holdem.evaluator"):
        result = evaluate_best_hand(parse_cards(["Kh", "Kd"]), parse_cards(["2c"]))
    assert result.strength == HandStrength.HIGH_CARD
    assert result.keys == (13, 13, 2)
    assert result.partial is True
    assert "Need 5 cards" in caplog.text


def test_five_card_scoring_requires_exactly_five():
    with pytest.raises(ValueError, match="Expected 5 cards"):
        evaluate_five_card_hand(parse_cards(["As", "Kd", "Jh", "9c"]))


def test_describe_strength_names():
    assert describe_strength(HandStrength.STRAIGHT_FLUSH) == "straight_flush"
    assert describe_strength(HandStrength.ONE_PAIR) == "pair"
    assert describe_strength(HandStrength.HIGH_CARD) == "high_card"
