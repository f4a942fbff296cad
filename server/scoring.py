"""
Scoring and legality rules for Papayoo tricks.

All functions here are pure. card_points() is the only scoring rule and is
used both for the live trick total the bots look at and for end-of-round
totals.
"""

from typing import Iterable, Optional, Sequence

from cards import Card, Suit
from constants import PAPAYOO_FACE_VALUE, PAPAYOO_POINTS


def is_papayoo(card: Card, papayoo_suit: Optional[Suit]) -> bool:
    """Whether this card is the 40-point 7 of the rolled suit."""
    return papayoo_suit is not None and card.suit == papayoo_suit and card.value == PAPAYOO_FACE_VALUE


def card_points(card: Card, papayoo_suit: Optional[Suit]) -> int:
    """
    Point value of a single card.

    Args:
        card: Card to evaluate.
        papayoo_suit: Suit rolled this round (None before the roll).

    Returns:
        Face value for Payoo cards, 40 for the Papayoo, 0 otherwise.
    """
    if card.suit == Suit.PAYOO:
        return card.value
    if is_papayoo(card, papayoo_suit):
        return PAPAYOO_POINTS
    return 0


def trick_points(cards: Iterable[Card], papayoo_suit: Optional[Suit]) -> int:
    """Total points of a set of cards (a trick, or a player's collected cards)."""
    return sum(card_points(card, papayoo_suit) for card in cards)


def is_legal_play(card: Card, hand: Sequence[Card], lead_suit: Optional[Suit]) -> bool:
    """
    Check suit-following legality.

    Opening a trick allows anything. Otherwise a player holding the lead
    suit must play it; a player void in the lead suit may play anything.
    """
    if lead_suit is None:
        return True
    if any(c.suit == lead_suit for c in hand):
        return card.suit == lead_suit
    return True


def playable_cards(hand: Sequence[Card], lead_suit: Optional[Suit]) -> list[Card]:
    """The legal subset of a hand. Never empty for a non-empty hand."""
    if lead_suit is None:
        return list(hand)
    following = [c for c in hand if c.suit == lead_suit]
    return following if following else list(hand)


def current_winning_play(plays: Sequence[dict], lead_suit: Optional[Suit]) -> Optional[dict]:
    """
    The play currently winning a trick.

    Args:
        plays: Trick plays as {"player_id": ..., "card": Card} in play order.
        lead_suit: Suit of the first card.

    Returns:
        The winning play, or None for an empty trick.
    """
    if not plays:
        return None
    winner = plays[0]
    for play in plays:
        card = play["card"]
        if card.suit != lead_suit:
            continue
        if winner["card"].suit != lead_suit or card.value > winner["card"].value:
            winner = play
    return winner


def trick_winner(plays: Sequence[dict], lead_suit: Optional[Suit]):
    """
    Determine who takes a trick.

    Only cards of the lead suit can win; the highest one does. Values are
    unique within a suit, so there are no ties.

    Returns:
        The winning player's id.
    """
    winner = current_winning_play(plays, lead_suit)
    if winner is None:
        raise ValueError("Cannot determine the winner of an empty trick")
    return winner["player_id"]
