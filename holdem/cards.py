from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import InsufficientCards, InvariantViolation

# Ace is rank 1 and always plays low.
RANKS = "A23456789TJQK"
SUITS = "shdc"

RANK_VALUE = {char: idx for idx, char in enumerate(RANKS, start=1)}
SUIT_VALUE = {char: idx for idx, char in enumerate(SUITS, start=1)}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: int

    def __post_init__(self) -> None:
        if not 1 <= self.rank <= 13:
            raise ValueError(f"Invalid rank: {self.rank}")
        if not 1 <= self.suit <= 4:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{RANKS[self.rank - 1]}{SUITS[self.suit - 1]}"


def new_shuffled_deck(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> List[Card]:
    rng = rng or random.Random(seed)
    deck = [Card(rank, suit) for suit in range(1, 5) for rank in range(1, 14)]
    rng.shuffle(deck)
    return deck


def deal(deck: Sequence[Card], count: int) -> Tuple[List[Card], List[Card]]:
    """Take ``count`` cards off the front. Returns ``(drawn, remaining)``."""
    if count < 0:
        raise ValueError("Cannot deal a negative number of cards")
    if len(deck) < count:
        raise InsufficientCards(f"Not enough cards left in deck ({len(deck)} < {count})")
    return list(deck[:count]), list(deck[count:])


def deal_hand(deck: Sequence[Card]) -> Tuple[List[Card], List[Card], List[Card], List[Card]]:
    # Player hole, AI hole, then the whole board up front.
    player, deck = deal(deck, 2)
    ai, deck = deal(deck, 2)
    community, deck = deal(deck, 5)
    dealt = player + ai + community
    if len(set(dealt)) != len(dealt):
        raise InvariantViolation("Duplicate card dealt: " + " ".join(cards_to_labels(dealt)))
    return player, ai, community, deck


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = label[0].upper(), label[1].lower()
    if rank not in RANK_VALUE:
        raise ValueError(f"Invalid rank: {label[0]}")
    if suit not in SUIT_VALUE:
        raise ValueError(f"Invalid suit: {label[1]}")
    return Card(RANK_VALUE[rank], SUIT_VALUE[suit])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
