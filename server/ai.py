"""AI decision engine for bot seats in Papayoo."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from cards import Card, Suit
from config import config
from scoring import card_points, current_winning_play, is_papayoo, playable_cards, trick_points


# Set AI_DEBUG=1 to log every bot decision at DEBUG level
AI_DEBUG = config.AI_DEBUG

ai_logger = logging.getLogger("papayoo.ai")
if AI_DEBUG:
    ai_logger.setLevel(logging.DEBUG)


def ai_log(message: str):
    """Log AI decision info when AI_DEBUG is enabled."""
    if AI_DEBUG:
        ai_logger.debug(message)


# =============================================================================
# AI Decision Constants
# =============================================================================

# A hand this long or longer counts as the early part of the round
EARLY_GAME_CARDS = 10

# Classic cards at or above this value are hard to lose later
HIGH_CARD_VALUE = 8

# Payoo cards at or above this value are dumped first when discarding
BIG_PAYOO_VALUE = 10

# Payoo cards at or below this value are led to draw out bigger ones
BAIT_PAYOO_MAX = 5

# A suit this short leaves a high card stranded
SHORT_SUIT_LENGTH = 2

# Pass danger for classic cards by face value
CLASSIC_PASS_DANGER = {
    10: 25.0,
    9: 20.0,
    8: 15.0,
    7: 35.0,  # any 7 may become the Papayoo once the die is rolled
    6: 5.0,
    5: 3.0,
}
SHORT_SUIT_PENALTY = 15.0

# Lead scoring weights
SUIT_LENGTH_WEIGHT = 10
VOID_LEAD_PENALTY = 50


# =============================================================================
# Void Tracking
# =============================================================================

def analyze_void_suits(
    trick_history: Iterable[Sequence[dict]],
    player_ids: Iterable[str],
    current_trick: Sequence[dict] = (),
) -> dict[str, set[Suit]]:
    """
    Work out which suits each seat is known to be out of.

    A seat that plays off-suit has no card of the lead suit left, and stays
    void for the rest of the round. Nothing is guessed: only observed
    discards count.

    Args:
        trick_history: Completed tricks of the round, each a list of
            {"player_id", "card"} plays in order.
        player_ids: Every seat, so seats with no voids still get an entry.
        current_trick: The trick in progress, if any.

    Returns:
        Mapping of player id to the set of suits it is void in.
    """
    voids: dict[str, set[Suit]] = {pid: set() for pid in player_ids}
    for trick in [*trick_history, current_trick]:
        if not trick:
            continue
        lead_suit = trick[0]["card"].suit
        for play in trick[1:]:
            if play["card"].suit != lead_suit:
                voids.setdefault(play["player_id"], set()).add(lead_suit)
    return voids


def count_void_opponents(suit: Suit, void_suits: dict[str, set[Suit]], player_id: str) -> int:
    """How many other seats are known void in a suit."""
    return sum(
        1 for pid, suits in void_suits.items()
        if pid != player_id and suit in suits
    )


@dataclass
class TrickContext:
    """What a bot can see about the trick it is about to play into."""

    current_trick: Sequence[dict]
    lead_suit: Optional[Suit]
    papayoo_suit: Optional[Suit]
    player_count: int
    player_id: str
    void_suits: dict[str, set[Suit]]

    @property
    def is_leading(self) -> bool:
        return len(self.current_trick) == 0

    @property
    def is_last(self) -> bool:
        return len(self.current_trick) == self.player_count - 1

    @property
    def points_on_table(self) -> int:
        return trick_points((p["card"] for p in self.current_trick), self.papayoo_suit)

    def voids_in(self, suit: Suit) -> int:
        return count_void_opponents(suit, self.void_suits, self.player_id)


def _highest(cards: Iterable[Card]) -> Card:
    return max(cards, key=lambda c: c.value)


def _lowest(cards: Iterable[Card]) -> Card:
    return min(cards, key=lambda c: c.value)


class PapayooAI:
    """Heuristic bot: avoid collecting points, shed danger early."""

    # -------------------------------------------------------------------------
    # Passing
    # -------------------------------------------------------------------------

    @staticmethod
    def pass_danger(card: Card, suit_counts: Counter) -> float:
        """
        How badly a card should leave the hand before the die is rolled.

        Big Payoo cards are pure liability. Small ones are kept to lead
        later and pull big Payoo cards out of other hands. Classic 7s are
        risky because any of them may become the Papayoo.
        """
        if card.suit == Suit.PAYOO:
            if card.value >= 15:
                return card.value * 2.5
            if card.value >= BIG_PAYOO_VALUE:
                return card.value * 2.0
            return card.value * 0.5

        danger = CLASSIC_PASS_DANGER.get(card.value, 0.0)
        if suit_counts[card.suit] <= SHORT_SUIT_LENGTH and card.value >= HIGH_CARD_VALUE:
            danger += SHORT_SUIT_PENALTY
        return danger

    @staticmethod
    def choose_cards_to_pass(hand: Sequence[Card], count: int) -> list[int]:
        """
        Pick the ids of the `count` most dangerous cards in hand.

        Ties keep hand order, so the choice is deterministic for a sorted hand.
        """
        suit_counts = Counter(c.suit for c in hand if c.suit != Suit.PAYOO)
        ranked = sorted(hand, key=lambda c: -PapayooAI.pass_danger(c, suit_counts))
        chosen = [c.id for c in ranked[:count]]
        ai_log(f"pass selection {[str(c) for c in ranked[:count]]}")
        return chosen

    # -------------------------------------------------------------------------
    # Playing
    # -------------------------------------------------------------------------

    @staticmethod
    def choose_card_to_play(
        hand: Sequence[Card],
        current_trick: Sequence[dict],
        lead_suit: Optional[Suit],
        papayoo_suit: Optional[Suit],
        player_count: int,
        player_id: str,
        void_suits: Optional[dict[str, set[Suit]]] = None,
    ) -> Card:
        """
        Choose a legal card to play.

        Args:
            hand: The bot's hand.
            current_trick: Plays already on the table.
            lead_suit: Suit of the first play, None when leading.
            papayoo_suit: Suit rolled this round.
            player_count: How many seats play into this trick.
            player_id: The bot's own id (excluded from void counts).
            void_suits: Known voids per seat, from analyze_void_suits().

        Returns:
            The card to play. Always legal.
        """
        legal = playable_cards(hand, lead_suit)
        if not legal:
            raise ValueError("Bot has no card to play")
        if len(legal) == 1:
            return legal[0]

        ctx = TrickContext(
            current_trick=current_trick,
            lead_suit=lead_suit,
            papayoo_suit=papayoo_suit,
            player_count=player_count,
            player_id=player_id,
            void_suits=void_suits or {},
        )

        if ctx.is_leading:
            card = PapayooAI._choose_lead(hand, legal, ctx)
            ai_log(f"{player_id} leads {card}")
            return card

        if not any(c.suit == lead_suit for c in hand):
            card = PapayooAI._choose_discard(legal, papayoo_suit)
            ai_log(f"{player_id} void in {lead_suit.value}, discards {card}")
            return card

        card = PapayooAI._choose_follow(legal, ctx)
        ai_log(f"{player_id} follows with {card} (table holds {ctx.points_on_table} pts)")
        return card

    @staticmethod
    def _without_papayoo(cards: list[Card], papayoo_suit: Optional[Suit]) -> list[Card]:
        """Drop the Papayoo unless it is the only card left."""
        kept = [c for c in cards if not is_papayoo(c, papayoo_suit)]
        return kept or cards

    @staticmethod
    def _choose_lead(hand: Sequence[Card], legal: list[Card], ctx: TrickContext) -> Card:
        options = PapayooAI._without_papayoo(legal, ctx.papayoo_suit)

        # Leading the rolled suit invites someone to drop the Papayoo on us
        off_papayoo_suit = [c for c in options if c.suit != ctx.papayoo_suit]
        if off_papayoo_suit:
            options = off_papayoo_suit

        # A void opponent discards freely, possibly points onto our trick
        safe_suits = [c for c in options if ctx.voids_in(c.suit) == 0]
        if safe_suits:
            options = safe_suits

        early = len(hand) >= EARLY_GAME_CARDS
        if early:
            high_free = [
                c for c in options
                if card_points(c, ctx.papayoo_suit) == 0 and c.value >= HIGH_CARD_VALUE
            ]
            if high_free:
                return _highest(high_free)

        payoo = [c for c in options if c.suit == Suit.PAYOO]
        seats_void_in_payoo = ctx.voids_in(Suit.PAYOO)
        if payoo and seats_void_in_payoo < ctx.player_count - 2:
            bait = [c for c in payoo if c.value <= BAIT_PAYOO_MAX]
            if bait:
                return _lowest(bait)
            medium = [c for c in payoo if BAIT_PAYOO_MAX < c.value <= BIG_PAYOO_VALUE]
            others = [c for c in options if c.suit != Suit.PAYOO]
            if len(medium) >= 2 and len(others) <= 3:
                return _lowest(medium)

        point_free = [c for c in options if card_points(c, ctx.papayoo_suit) == 0]
        if point_free:
            suit_lengths = Counter(c.suit for c in hand)

            def lead_score(card: Card) -> int:
                value_bonus = card.value * 2 if early else card.value
                return (
                    suit_lengths[card.suit] * SUIT_LENGTH_WEIGHT
                    + value_bonus
                    - ctx.voids_in(card.suit) * VOID_LEAD_PENALTY
                )

            return max(point_free, key=lead_score)

        return min(options, key=lambda c: (card_points(c, ctx.papayoo_suit), c.value))

    @staticmethod
    def _choose_follow(legal: list[Card], ctx: TrickContext) -> Card:
        candidates = PapayooAI._without_papayoo(legal, ctx.papayoo_suit)
        if len(candidates) == 1:
            return candidates[0]

        winning_play = current_winning_play(ctx.current_trick, ctx.lead_suit)
        to_beat = winning_play["card"].value
        losing = [c for c in candidates if c.value < to_beat]
        winning = [c for c in candidates if c.value > to_beat]

        if ctx.points_on_table == 0:
            # Last to act takes an empty trick for free
            if ctx.is_last and winning:
                return _lowest(winning)
            if losing:
                return _highest(losing)
            return _lowest(winning)

        if losing:
            return _highest(losing)
        return min(candidates, key=lambda c: (card_points(c, ctx.papayoo_suit), c.value))

    @staticmethod
    def _choose_discard(legal: list[Card], papayoo_suit: Optional[Suit]) -> Card:
        """
        Discard while void in the lead suit. An off-suit card never wins,
        so this is the moment to unload points onto whoever takes the trick.
        """
        payoo = [c for c in legal if c.suit == Suit.PAYOO]
        if payoo:
            biggest = _highest(payoo)
            if biggest.value >= BIG_PAYOO_VALUE:
                return biggest

        for card in legal:
            if is_papayoo(card, papayoo_suit):
                return card

        high = [c for c in legal if c.suit != Suit.PAYOO and c.value >= HIGH_CARD_VALUE]
        if high:
            return _highest(high)

        if payoo:
            return _highest(payoo)

        return _highest(legal)
