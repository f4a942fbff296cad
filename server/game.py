"""
Game logic for Papayoo.

This module implements the per-room state machine: dealing, the passing
protocol, the die roll, trick play, scoring and multi-round progression.
Card and scoring rules live in cards.py and scoring.py; bot seats are
driven by ai.py.

Papayoo Rules Summary:
    - 60 cards: four classic suits 1-10 plus the Payoo suit 1-20
    - Every seat passes a few cards to the seat on its right
    - A die picks a classic suit; its 7 (the "Papayoo") is worth 40 points
    - Follow the lead suit if you can; the highest lead-suit card takes the trick
    - Payoo cards score their face value; lowest cumulative score wins

Phase Flow:
    PASSING -> ROLLING_DIE -> PLAYING <-> TRICK_END -> ROUND_END -> PASSING ...
    The last trick of a round scores immediately (ROUND_END or GAME_END).
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from ai import PapayooAI, analyze_void_suits
from cards import CLASSIC_SUITS, Card, Suit, build_deck, cards_to_pass, deal, find_card, roll_papayoo_die, shuffle, sort_hand
from constants import DEFAULT_MAX_ROUNDS, DEFAULT_TARGET_SCORE, INFINITE_ROUNDS, MAX_PLAYERS, MIN_PLAYERS
from errors import (
    GameValidationError,
    IllegalPlayError,
    NotFoundError,
    PhaseMismatchError,
    TurnViolationError,
)
from scoring import is_legal_play, trick_points, trick_winner


logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    """
    Phases of a Papayoo game.

    Flow: PASSING -> ROLLING_DIE -> PLAYING <-> TRICK_END -> ROUND_END
    After the last round: GAME_END
    """

    PASSING = "passing"          # Seats choosing cards to pass
    ROLLING_DIE = "rolling_die"  # Waiting for the die that picks the Papayoo suit
    PLAYING = "playing"          # A trick is open
    TRICK_END = "trick_end"      # Trick complete, shown until collected
    ROUND_END = "round_end"      # Hands empty, round scored
    GAME_END = "game_end"        # Terminal


def _plays_to_dict(plays: list[dict]) -> list[dict]:
    return [{"player_id": p["player_id"], "card": p["card"].to_dict()} for p in plays]


def _plays_from_dict(data: list[dict]) -> list[dict]:
    return [{"player_id": p["player_id"], "card": Card.from_dict(p["card"])} for p in data]


@dataclass
class Player:
    """
    A seat at the table.

    Attributes:
        id: Unique identifier for the seat.
        name: Display name.
        is_bot: Whether the seat is driven by PapayooAI.
        hand: Cards held, kept sorted.
        collected_cards: Cards won in tricks this round.
        selected_cards: Card ids staged for passing.
        cards_to_pass: Card ids confirmed for passing (empty until confirmed).
        score: Cumulative points across rounds.
        last_round_points: Points taken in the most recent scored round.
    """

    id: str
    name: str
    is_bot: bool = False
    hand: list[Card] = field(default_factory=list)
    collected_cards: list[Card] = field(default_factory=list)
    selected_cards: list[int] = field(default_factory=list)
    cards_to_pass: list[int] = field(default_factory=list)
    score: int = 0
    last_round_points: int = 0

    @property
    def has_confirmed_pass(self) -> bool:
        return bool(self.cards_to_pass)

    def reset_for_round(self, hand: list[Card]) -> None:
        self.hand = hand
        self.collected_cards = []
        self.selected_cards = []
        self.cards_to_pass = []

    def to_dict(self) -> dict:
        """Full serialization, used for persistence."""
        return {
            "id": self.id,
            "name": self.name,
            "is_bot": self.is_bot,
            "hand": [c.to_dict() for c in self.hand],
            "collected_cards": [c.to_dict() for c in self.collected_cards],
            "selected_cards": list(self.selected_cards),
            "cards_to_pass": list(self.cards_to_pass),
            "score": self.score,
            "last_round_points": self.last_round_points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        return cls(
            id=data["id"],
            name=data["name"],
            is_bot=data.get("is_bot", False),
            hand=[Card.from_dict(c) for c in data.get("hand", [])],
            collected_cards=[Card.from_dict(c) for c in data.get("collected_cards", [])],
            selected_cards=list(data.get("selected_cards", [])),
            cards_to_pass=list(data.get("cards_to_pass", [])),
            score=data.get("score", 0),
            last_round_points=data.get("last_round_points", 0),
        )

    def to_view_dict(self, is_self: bool) -> dict:
        """
        Serialization as seen by one viewer.

        Opponents see how many cards this seat holds but not which ones, and
        never see its passing selection.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "is_bot": self.is_bot,
            "hand_count": len(self.hand),
            "collected_cards": [c.to_dict() for c in self.collected_cards],
            "has_confirmed_pass": self.has_confirmed_pass,
            "score": self.score,
            "last_round_points": self.last_round_points,
        }
        if is_self:
            data["hand"] = [c.to_dict() for c in self.hand]
            data["selected_cards"] = list(self.selected_cards)
            data["cards_to_pass"] = list(self.cards_to_pass)
        else:
            data["hand"] = [{"hidden": True} for _ in self.hand]
        return data


@dataclass
class Game:
    """
    Authoritative state of one room's game.

    Every public operation validates the whole request first and raises a
    GameError subclass without touching state when it fails. Bot seats act
    inside the same call that hands them the turn (see run_bot_turns).

    Attributes:
        room_code: Room this game belongs to.
        players: Seats in table order.
        phase: Current phase.
        round_number: Current round (1-indexed).
        max_rounds: Number of rounds, or "infinite" to play to target_score.
        target_score: Cumulative score that ends an infinite game.
        papayoo_suit: Suit rolled this round (None before the roll).
        current_player: Index of the acting seat (None outside trick play).
        lead_suit: Suit of the first card of the open trick.
        current_trick: Plays on the table, {"player_id", "card"} in order.
        trick_history: Completed tricks of this round.
        trick_count: Completed tricks this round.
        trick_winner_id: Winner of the trick awaiting collection.
        cards_to_pass: Cards each seat passes this game.
        version: Optimistic concurrency counter, bumped on each save.
        last_update: ISO timestamp of the last mutation.
        message: Human-readable status line.
    """

    room_code: str
    players: list[Player] = field(default_factory=list)
    phase: GamePhase = GamePhase.PASSING
    round_number: int = 1
    max_rounds: Union[int, str] = DEFAULT_MAX_ROUNDS
    target_score: int = DEFAULT_TARGET_SCORE
    papayoo_suit: Optional[Suit] = None
    current_player: Optional[int] = None
    lead_suit: Optional[Suit] = None
    current_trick: list[dict] = field(default_factory=list)
    trick_history: list[list[dict]] = field(default_factory=list)
    trick_count: int = 0
    trick_winner_id: Optional[str] = None
    cards_to_pass: int = 0
    version: int = 0
    last_update: str = ""
    message: str = ""

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        room_code: str,
        seats: list[dict],
        max_rounds: Union[int, str] = DEFAULT_MAX_ROUNDS,
        rng: Optional[random.Random] = None,
        target_score: int = DEFAULT_TARGET_SCORE,
    ) -> "Game":
        """
        Create a game from a room's seat list and deal the first round.

        Args:
            room_code: Room code.
            seats: Seat dicts with "id", "name" and optional "is_bot".
            max_rounds: Positive round count or "infinite".
            rng: Random source for the shuffle (a fresh one if omitted).
            target_score: Score that ends an infinite game.

        Raises:
            GameValidationError: Bad seat count, duplicate ids, bad round setting.
        """
        if not MIN_PLAYERS <= len(seats) <= MAX_PLAYERS:
            raise GameValidationError(
                f"Papayoo needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(seats)}"
            )
        ids = [seat.get("id") for seat in seats]
        if any(not pid for pid in ids):
            raise GameValidationError("Every seat needs an id")
        if len(set(ids)) != len(ids):
            raise GameValidationError("Seat ids must be unique")
        if max_rounds != INFINITE_ROUNDS and (
            isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds < 1
        ):
            raise GameValidationError(f"max_rounds must be a positive integer or '{INFINITE_ROUNDS}'")
        if isinstance(target_score, bool) or not isinstance(target_score, int) or target_score < 1:
            raise GameValidationError("target_score must be a positive integer")

        players = [
            Player(id=seat["id"], name=seat.get("name") or seat["id"], is_bot=bool(seat.get("is_bot", False)))
            for seat in seats
        ]
        game = cls(
            room_code=room_code,
            players=players,
            max_rounds=max_rounds,
            target_score=target_score,
            cards_to_pass=cards_to_pass(len(players)),
        )
        game._deal(rng or random.Random())
        logger.info(
            f"Game created in room {room_code}: {len(players)} players, max_rounds={max_rounds}"
        )
        return game

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_infinite(self) -> bool:
        return self.max_rounds == INFINITE_ROUNDS

    def get_player(self, player_id: str) -> Optional[Player]:
        """Find a seat by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def require_player(self, player_id: str) -> Player:
        """Find a seat by id or raise NotFoundError."""
        player = self.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id!r} is not seated in room {self.room_code}")
        return player

    def seat_index(self, player_id: str) -> int:
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        raise NotFoundError(f"Player {player_id!r} is not seated in room {self.room_code}")

    def acting_player(self) -> Optional[Player]:
        """The seat whose turn it is, if a trick is open."""
        if self.current_player is None:
            return None
        return self.players[self.current_player]

    def _require_phase(self, *phases: GamePhase) -> None:
        if self.phase not in phases:
            expected = " or ".join(p.value for p in phases)
            raise PhaseMismatchError(f"Action needs phase {expected}, game is in {self.phase.value}")

    def _touch(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        self.last_update = datetime.now(timezone.utc).isoformat()

    # -------------------------------------------------------------------------
    # Dealing & Passing
    # -------------------------------------------------------------------------

    def _deal(self, rng: random.Random) -> None:
        """Shuffle, deal every card, reset round state and let bots pass."""
        hands = deal(shuffle(build_deck(), rng), self.player_count)
        for player, hand in zip(self.players, hands):
            player.reset_for_round(hand)

        self.phase = GamePhase.PASSING
        self.papayoo_suit = None
        self.current_player = None
        self.lead_suit = None
        self.current_trick = []
        self.trick_history = []
        self.trick_count = 0
        self.trick_winner_id = None
        self._touch(f"Round {self.round_number}: choose {self.cards_to_pass} cards to pass")

        for player in self.players:
            if player.is_bot:
                chosen = PapayooAI.choose_cards_to_pass(player.hand, self.cards_to_pass)
                self._confirm_selection(player, chosen)

    def _validate_pass_ids(self, player: Player, card_ids, exact: bool) -> list[int]:
        if not isinstance(card_ids, (list, tuple)):
            raise GameValidationError("card_ids must be a list of card ids")
        if any(isinstance(cid, bool) or not isinstance(cid, int) for cid in card_ids):
            raise GameValidationError("card_ids must be integers")
        if len(set(card_ids)) != len(card_ids):
            raise GameValidationError("card_ids must not repeat")
        if exact and len(card_ids) != self.cards_to_pass:
            raise GameValidationError(
                f"Select exactly {self.cards_to_pass} cards to pass, got {len(card_ids)}"
            )
        if len(card_ids) > self.cards_to_pass:
            raise GameValidationError(f"At most {self.cards_to_pass} cards can be passed")
        held = {c.id for c in player.hand}
        missing = [cid for cid in card_ids if cid not in held]
        if missing:
            raise GameValidationError(f"Cards {missing} are not in {player.name}'s hand")
        return list(card_ids)

    def select_cards_to_pass(self, player_id: str, card_ids: list[int]) -> None:
        """
        Stage up to cards_to_pass ids from the seat's own hand.

        Raises:
            NotFoundError, PhaseMismatchError, GameValidationError.
        """
        player = self.require_player(player_id)
        self._require_phase(GamePhase.PASSING)
        if player.has_confirmed_pass:
            raise GameValidationError(f"{player.name} has already confirmed a pass")
        player.selected_cards = self._validate_pass_ids(player, card_ids, exact=False)
        self._touch()

    def confirm_pass(self, player_id: str, card_ids: Optional[list[int]] = None) -> None:
        """
        Lock in a seat's pass, staging card_ids first when given.

        Once every seat has confirmed, the cards change hands and the game
        moves to ROLLING_DIE.

        Raises:
            NotFoundError, PhaseMismatchError, GameValidationError.
        """
        player = self.require_player(player_id)
        self._require_phase(GamePhase.PASSING)
        if player.has_confirmed_pass:
            raise GameValidationError(f"{player.name} has already confirmed a pass")
        chosen = self._validate_pass_ids(
            player, player.selected_cards if card_ids is None else card_ids, exact=True
        )
        self._confirm_selection(player, chosen)

    def _confirm_selection(self, player: Player, card_ids: list[int]) -> None:
        player.selected_cards = list(card_ids)
        player.cards_to_pass = list(card_ids)

        waiting = [p.name for p in self.players if not p.has_confirmed_pass]
        if waiting:
            self._touch(f"Waiting for {', '.join(waiting)} to pass")
            return
        self._exchange_passes()

    def _exchange_passes(self) -> None:
        """Seat i receives the cards confirmed by seat (i + 1) mod n."""
        outgoing: list[list[Card]] = []
        for player in self.players:
            passing = set(player.cards_to_pass)
            outgoing.append([c for c in player.hand if c.id in passing])
            player.hand = [c for c in player.hand if c.id not in passing]

        n = self.player_count
        for i, player in enumerate(self.players):
            player.hand = sort_hand(player.hand + outgoing[(i + 1) % n])
            player.selected_cards = []
            player.cards_to_pass = []

        self.phase = GamePhase.ROLLING_DIE
        self._touch("Cards passed. Roll the die to pick the Papayoo suit")
        logger.debug(f"Room {self.room_code}: passes exchanged for round {self.round_number}")

    # -------------------------------------------------------------------------
    # Die Roll
    # -------------------------------------------------------------------------

    def roll_die(
        self,
        player_id: str,
        rng: Optional[random.Random] = None,
        suit: Optional[Union[Suit, str]] = None,
    ) -> Suit:
        """
        Pick the Papayoo suit and open the first trick of the round.

        Args:
            player_id: Seat rolling the die (any seat may roll).
            rng: Random source when no suit is given.
            suit: Classic suit to use instead of rolling.

        Returns:
            The Papayoo suit.

        Raises:
            NotFoundError, PhaseMismatchError, GameValidationError.
        """
        self.require_player(player_id)
        self._require_phase(GamePhase.ROLLING_DIE)
        if suit is not None:
            try:
                rolled = Suit(suit)
            except ValueError:
                raise GameValidationError(f"Unknown suit {suit!r}")
            if rolled not in CLASSIC_SUITS:
                raise GameValidationError("The Papayoo suit must be a classic suit")
        else:
            rolled = roll_papayoo_die(rng or random.Random())

        self.papayoo_suit = rolled
        self.phase = GamePhase.PLAYING
        leader = self._next_seat_with_cards((self.round_number - 1) % self.player_count - 1)
        self.current_player = leader
        self._touch(
            f"Papayoo is the 7 of {rolled.value}. {self.players[leader].name} leads"
        )
        logger.info(f"Room {self.room_code}: round {self.round_number} papayoo suit {rolled.value}")
        self.run_bot_turns()
        return rolled

    # -------------------------------------------------------------------------
    # Trick Play
    # -------------------------------------------------------------------------

    def _next_seat_with_cards(self, after: int, skip: Optional[set] = None) -> Optional[int]:
        """First seat after `after` (wrapping) that still holds cards."""
        skip = skip or set()
        n = self.player_count
        for step in range(1, n + 1):
            index = (after + step) % n
            player = self.players[index]
            if player.hand and player.id not in skip:
                return index
        return None

    def _seats_in_trick(self) -> int:
        """Seats that play into the open trick: those already on it plus those yet to act."""
        played = {p["player_id"] for p in self.current_trick}
        waiting = [p for p in self.players if p.hand and p.id not in played]
        return len(played) + len(waiting)

    def play_card(self, player_id: str, card_id: int) -> None:
        """
        Play a card from the acting seat's hand, then let bots act.

        Raises:
            NotFoundError: Unknown seat.
            PhaseMismatchError: No trick is open.
            TurnViolationError: Not this seat's turn.
            GameValidationError: card_id is not an integer.
            IllegalPlayError: Card not in hand, or it breaks suit-following.
        """
        player = self.require_player(player_id)
        self._require_phase(GamePhase.PLAYING)
        index = self.seat_index(player_id)
        if index != self.current_player:
            acting = self.acting_player()
            raise TurnViolationError(
                f"It is {acting.name if acting else 'nobody'}'s turn, not {player.name}'s"
            )
        if isinstance(card_id, bool) or not isinstance(card_id, int):
            raise GameValidationError("card_id must be an integer")
        card = find_card(player.hand, card_id)
        if card is None:
            raise IllegalPlayError(f"Card {card_id} is not in {player.name}'s hand")
        if not is_legal_play(card, player.hand, self.lead_suit):
            raise IllegalPlayError(f"{card} does not follow {self.lead_suit.value}")

        self._apply_play(index, card)
        self.run_bot_turns()

    def _apply_play(self, index: int, card: Card) -> None:
        player = self.players[index]
        player.hand = [c for c in player.hand if c.id != card.id]
        if not self.current_trick:
            self.lead_suit = card.suit
        self.current_trick.append({"player_id": player.id, "card": card})

        played = {p["player_id"] for p in self.current_trick}
        next_index = self._next_seat_with_cards(index, skip=played)
        if next_index is None:
            self._complete_trick()
        else:
            self.current_player = next_index
            self._touch(f"{player.name} played {card}. {self.players[next_index].name} to play")

    def _complete_trick(self) -> None:
        winner_id = trick_winner(self.current_trick, self.lead_suit)
        winner = self.require_player(winner_id)
        points = trick_points((p["card"] for p in self.current_trick), self.papayoo_suit)

        self.trick_history.append(list(self.current_trick))
        self.trick_count += 1
        self.trick_winner_id = winner_id

        if not any(p.hand for p in self.players):
            # Last trick of the round scores immediately
            winner.collected_cards.extend(p["card"] for p in self.current_trick)
            self._end_round()
            return

        self.phase = GamePhase.TRICK_END
        self.current_player = self._trick_leader(winner_id)
        self._touch(f"{winner.name} takes the trick ({points} pts)")

    def _trick_leader(self, winner_id: str) -> int:
        """The winner leads, or the next seat holding cards once the winner's hand is empty."""
        return self._next_seat_with_cards(self.seat_index(winner_id) - 1)

    def collect_trick(self, player_id: str) -> None:
        """
        Hand the finished trick to its winner and open the next one.

        Raises:
            NotFoundError, PhaseMismatchError.
        """
        self.require_player(player_id)
        self._require_phase(GamePhase.TRICK_END)

        winner = self.require_player(self.trick_winner_id)
        winner.collected_cards.extend(p["card"] for p in self.current_trick)
        self.current_trick = []
        self.lead_suit = None
        self.trick_winner_id = None
        self.phase = GamePhase.PLAYING
        self.current_player = self._trick_leader(winner.id)
        self._touch(f"{self.players[self.current_player].name} leads")
        self.run_bot_turns()

    def run_bot_turns(self) -> int:
        """
        Let consecutive bot seats play.

        Stops at a human seat or as soon as the trick completes. Bounded by
        the number of seats.

        Returns:
            Number of cards the bots played.
        """
        plays = 0
        for _ in range(self.player_count):
            if self.phase != GamePhase.PLAYING:
                break
            player = self.acting_player()
            if player is None or not player.is_bot:
                break
            void_suits = analyze_void_suits(
                self.trick_history,
                [p.id for p in self.players],
                self.current_trick,
            )
            card = PapayooAI.choose_card_to_play(
                player.hand,
                self.current_trick,
                self.lead_suit,
                self.papayoo_suit,
                self._seats_in_trick(),
                player.id,
                void_suits,
            )
            self._apply_play(self.current_player, card)
            plays += 1
        return plays

    # -------------------------------------------------------------------------
    # Scoring & Round End
    # -------------------------------------------------------------------------

    def _end_round(self) -> None:
        """Score collected cards, add them to totals and decide if the game is over."""
        for player in self.players:
            player.last_round_points = trick_points(player.collected_cards, self.papayoo_suit)
            player.score += player.last_round_points
            player.collected_cards = []

        self.current_trick = []
        self.trick_winner_id = None
        self.lead_suit = None
        if self.is_game_over():
            self.phase = GamePhase.GAME_END
            leader = min(self.players, key=lambda p: p.score)
            self._touch(f"Game over. {leader.name} wins with {leader.score} points")
            logger.info(
                f"Room {self.room_code}: game over after round {self.round_number}, "
                f"winner {leader.id} ({leader.score} pts)"
            )
        else:
            self.phase = GamePhase.ROUND_END
            self._touch(f"Round {self.round_number} over")
            logger.info(f"Room {self.room_code}: round {self.round_number} scored")

    def is_game_over(self) -> bool:
        if self.is_infinite:
            return any(p.score >= self.target_score for p in self.players)
        return self.round_number >= self.max_rounds

    def start_next_round(self, player_id: str, rng: Optional[random.Random] = None) -> None:
        """
        Deal the next round.

        Raises:
            NotFoundError, PhaseMismatchError.
        """
        self.require_player(player_id)
        self._require_phase(GamePhase.ROUND_END)
        self.round_number += 1
        self._deal(rng or random.Random())

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Full snapshot, as persisted. Never send this to a client."""
        return {
            "room_code": self.room_code,
            "player_count": self.player_count,
            "players": [p.to_dict() for p in self.players],
            "phase": self.phase.value,
            "round_number": self.round_number,
            "max_rounds": self.max_rounds,
            "target_score": self.target_score,
            "papayoo_suit": self.papayoo_suit.value if self.papayoo_suit else None,
            "current_player": self.current_player,
            "lead_suit": self.lead_suit.value if self.lead_suit else None,
            "current_trick": _plays_to_dict(self.current_trick),
            "trick_history": [_plays_to_dict(t) for t in self.trick_history],
            "trick_count": self.trick_count,
            "trick_winner_id": self.trick_winner_id,
            "cards_to_pass": self.cards_to_pass,
            "version": self.version,
            "last_update": self.last_update,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Game":
        return cls(
            room_code=data["room_code"],
            players=[Player.from_dict(p) for p in data["players"]],
            phase=GamePhase(data["phase"]),
            round_number=data.get("round_number", 1),
            max_rounds=data.get("max_rounds", DEFAULT_MAX_ROUNDS),
            target_score=data.get("target_score", DEFAULT_TARGET_SCORE),
            papayoo_suit=Suit(data["papayoo_suit"]) if data.get("papayoo_suit") else None,
            current_player=data.get("current_player"),
            lead_suit=Suit(data["lead_suit"]) if data.get("lead_suit") else None,
            current_trick=_plays_from_dict(data.get("current_trick", [])),
            trick_history=[_plays_from_dict(t) for t in data.get("trick_history", [])],
            trick_count=data.get("trick_count", 0),
            trick_winner_id=data.get("trick_winner_id"),
            cards_to_pass=data.get("cards_to_pass", 0),
            version=data.get("version", 0),
            last_update=data.get("last_update", ""),
            message=data.get("message", ""),
        )

    def get_state(self, for_player_id: str) -> dict:
        """
        Get the game state as one seat may see it.

        Other seats' hands are replaced by {"hidden": True} placeholders
        (the count is kept) and their passing selections are dropped. The
        game itself is not modified.

        Args:
            for_player_id: The seat that will receive this state.

        Returns:
            Dict suitable for JSON serialization.
        """
        state = self.to_dict()
        acting = self.acting_player()
        state["players"] = [p.to_view_dict(is_self=p.id == for_player_id) for p in self.players]
        state["current_player_id"] = acting.id if acting else None
        state["is_infinite"] = self.is_infinite
        return state
