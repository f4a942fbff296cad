"""
Card and deck model for Papayoo.

The Papayoo deck has 60 cards:
    - Four classic suits (spade, heart, diamond, club), values 1-10
    - The Payoo suit, values 1-20

Card ids are 0..59 in canonical order, so every card in a round is
identified by its id alone. Dealing always distributes the whole deck, so
with 7 or 8 players the first seats hold one card more than the others.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from constants import CARDS_TO_PASS, CLASSIC_MAX_VALUE, PAYOO_MAX_VALUE


class Suit(str, Enum):
    """Card suits. PAYOO is the fifth, point-carrying suit."""

    SPADE = "spade"
    HEART = "heart"
    DIAMOND = "diamond"
    CLUB = "club"
    PAYOO = "payoo"


CLASSIC_SUITS: tuple[Suit, ...] = (Suit.SPADE, Suit.HEART, Suit.DIAMOND, Suit.CLUB)

# Display and sort order
SUIT_ORDER: dict[Suit, int] = {suit: i for i, suit in enumerate(Suit)}


@dataclass(frozen=True)
class Card:
    """
    An immutable playing card.

    Attributes:
        id: Unique id within the deck (0-59).
        suit: The card's suit.
        value: Face value (1-10 for classic suits, 1-20 for Payoo).
    """

    id: int
    suit: Suit
    value: int

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {"id": self.id, "suit": self.suit.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        return cls(id=data["id"], suit=Suit(data["suit"]), value=data["value"])

    def __str__(self) -> str:
        return f"{self.suit.value}-{self.value}"


def build_deck() -> list[Card]:
    """
    Build the canonical 60-card deck.

    Returns:
        Cards in deterministic order: spade 1-10, heart 1-10, diamond 1-10,
        club 1-10, payoo 1-20, with ids 0..59.
    """
    deck: list[Card] = []
    for suit in CLASSIC_SUITS:
        for value in range(1, CLASSIC_MAX_VALUE + 1):
            deck.append(Card(len(deck), suit, value))
    for value in range(1, PAYOO_MAX_VALUE + 1):
        deck.append(Card(len(deck), Suit.PAYOO, value))
    return deck


def shuffle(deck: list[Card], rng: random.Random) -> list[Card]:
    """
    Return a uniformly shuffled copy of the deck (Fisher-Yates).

    Args:
        deck: Cards to shuffle. Left untouched.
        rng: Random source, injected so tests can seed it.
    """
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sort_hand(hand: Iterable[Card]) -> list[Card]:
    """Sort by suit (spade, heart, diamond, club, payoo) then ascending value."""
    return sorted(hand, key=lambda c: (SUIT_ORDER[c.suit], c.value))


def deal(deck: list[Card], player_count: int) -> list[list[Card]]:
    """
    Deal the whole deck round-robin into sorted hands.

    Args:
        deck: The (shuffled) deck.
        player_count: Number of seats, 3-8.

    Returns:
        One sorted hand per seat. Every card is dealt.
    """
    if player_count not in CARDS_TO_PASS:
        raise ValueError(f"Unsupported player count: {player_count}")
    hands: list[list[Card]] = [[] for _ in range(player_count)]
    for index, card in enumerate(deck):
        hands[index % player_count].append(card)
    return [sort_hand(hand) for hand in hands]


def cards_to_pass(player_count: int) -> int:
    """Number of cards each seat passes: 5 for 3-4 players, 4 for 5, 3 for 6-8."""
    if player_count not in CARDS_TO_PASS:
        raise ValueError(f"Unsupported player count: {player_count}")
    return CARDS_TO_PASS[player_count]


def roll_papayoo_die(rng: random.Random) -> Suit:
    """Roll the Papayoo die: one of the four classic suits."""
    return rng.choice(CLASSIC_SUITS)


def find_card(hand: Iterable[Card], card_id: int) -> Optional[Card]:
    """Find a card in a hand by id."""
    for card in hand:
        if card.id == card_id:
            return card
    return None
