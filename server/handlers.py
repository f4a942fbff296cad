"""Game action handlers for the Papayoo server.

Each handler corresponds to a single action name from the client. Handlers
are dispatched via the HANDLERS dict (see dispatch()), and all follow the
same shape: load the snapshot, check the seat, mutate, save with the
version that was loaded, and answer with the state as that seat sees it.
"""

import random
from typing import Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from errors import GameValidationError, NotFoundError
from game import Game
from logging_config import get_logger, player_id_var, room_code_var
from models.requests import (
    ActionRequest,
    ConfirmPassRequest,
    InitRequest,
    PlayCardRequest,
    RollDieRequest,
    SelectCardsRequest,
    StateRequest,
)
from room import Room
from stores.state_cache import StateCache

logger = get_logger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def parse_request(model: Type[RequestT], data: dict) -> RequestT:
    """Validate a request body, turning pydantic errors into GameValidationError."""
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise GameValidationError(f"Invalid request: {problems}") from e


def success(game: Game, player_id: str) -> dict:
    return {"success": True, "game": game.get_state(player_id)}


async def load_game(cache: StateCache, room_code: str) -> Game:
    snapshot = await cache.get_game(room_code)
    if snapshot is None:
        raise NotFoundError(f"No game in room {room_code}")
    return Game.from_dict(snapshot)


async def apply_action(cache: StateCache, req: ActionRequest, mutate: Callable[[Game], None]) -> dict:
    """
    Load, guard, mutate and save one game.

    The seat is resolved before anything else so unknown players fail
    closed. A rejected mutation raises before the save, so the stored
    snapshot is untouched.
    """
    game = await load_game(cache, req.room_code)
    game.require_player(req.player_id)
    loaded_version = game.version

    mutate(game)

    stored = await cache.save_game(game.to_dict(), expected_version=loaded_version)
    game.version = stored["version"]
    return success(game, req.player_id)


# ---------------------------------------------------------------------------
# Lifecycle handlers
# ---------------------------------------------------------------------------

async def handle_init(data: dict, cache: StateCache, *, rng: Optional[random.Random] = None, **kw) -> dict:
    req = parse_request(InitRequest, data)
    payload = req.room
    room = Room.from_dict({
        "code": payload.code,
        "host_id": payload.host_id or req.player_id,
        "seats": [seat.model_dump() for seat in payload.seats],
        "max_rounds": payload.max_rounds,
    })
    room_code_var.set(room.code)
    if room.get_seat(req.player_id) is None:
        raise NotFoundError(f"Player {req.player_id!r} is not seated in room {room.code}")

    create_kwargs = {"rng": rng}
    if payload.target_score is not None:
        create_kwargs["target_score"] = payload.target_score
    game = Game.create(room.code, room.seat_list(), room.max_rounds, **create_kwargs)

    room.mark_playing()
    await cache.save_room(room.to_dict())
    stored = await cache.save_game(game.to_dict())
    game.version = stored["version"]

    logger.with_context(action="init").info(
        f"Game initialized: {game.player_count} seats, "
        f"{sum(p.is_bot for p in game.players)} bots"
    )
    return success(game, req.player_id)


async def handle_state(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(StateRequest, data)
    game = await load_game(cache, req.room_code)
    game.require_player(req.player_id)
    return success(game, req.player_id)


async def handle_back_to_lobby(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(StateRequest, data)
    game = await load_game(cache, req.room_code)
    game.require_player(req.player_id)

    await cache.delete_game(req.room_code)

    room_data = await cache.get_room(req.room_code)
    room = None
    if room_data is not None:
        room = Room.from_dict(room_data)
        room.mark_waiting()
        await cache.save_room(room.to_dict())

    logger.with_context(action="back_to_lobby").info("Game closed, room back in lobby")
    return {"success": True, "game": None, "room": room.to_dict() if room else None}


# ---------------------------------------------------------------------------
# Passing handlers
# ---------------------------------------------------------------------------

async def handle_select_cards_to_pass(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(SelectCardsRequest, data)
    return await apply_action(
        cache, req, lambda game: game.select_cards_to_pass(req.player_id, req.card_ids)
    )


async def handle_confirm_pass(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(ConfirmPassRequest, data)
    return await apply_action(
        cache, req, lambda game: game.confirm_pass(req.player_id, req.card_ids)
    )


# ---------------------------------------------------------------------------
# Round handlers
# ---------------------------------------------------------------------------

async def handle_roll_die(data: dict, cache: StateCache, *, rng: Optional[random.Random] = None, **kw) -> dict:
    req = parse_request(RollDieRequest, data)
    return await apply_action(
        cache, req, lambda game: game.roll_die(req.player_id, rng=rng, suit=req.suit)
    )


async def handle_play_card(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(PlayCardRequest, data)
    return await apply_action(
        cache, req, lambda game: game.play_card(req.player_id, req.card_id)
    )


async def handle_collect_trick(data: dict, cache: StateCache, **kw) -> dict:
    req = parse_request(StateRequest, data)
    return await apply_action(cache, req, lambda game: game.collect_trick(req.player_id))


async def handle_new_round(data: dict, cache: StateCache, *, rng: Optional[random.Random] = None, **kw) -> dict:
    req = parse_request(StateRequest, data)
    return await apply_action(
        cache, req, lambda game: game.start_next_round(req.player_id, rng=rng)
    )


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

HANDLERS = {
    "init": handle_init,
    "state": handle_state,
    "select_cards_to_pass": handle_select_cards_to_pass,
    "confirm_pass": handle_confirm_pass,
    "roll_die": handle_roll_die,
    "play_card": handle_play_card,
    "collect_trick": handle_collect_trick,
    "continue": handle_collect_trick,
    "new_round": handle_new_round,
    "back_to_lobby": handle_back_to_lobby,
}


async def dispatch(action: str, data: dict, cache: StateCache, **kw) -> dict:
    """
    Run one action.

    Room and player ids from the body are bound to the logging context for
    the duration of the call.

    Raises:
        GameValidationError: Unknown action or malformed body.
        GameError: Whatever the handler rejects.
    """
    handler = HANDLERS.get(action)
    if handler is None:
        raise GameValidationError(f"Unknown action {action!r}")

    data = data or {}
    if not isinstance(data, dict):
        raise GameValidationError("Request body must be a JSON object")
    room_token = room_code_var.set(str(data.get("room_code") or "").strip().upper() or None)
    player_token = player_id_var.set(str(data["player_id"]) if data.get("player_id") else None)
    try:
        result = await handler(data, cache, **kw)
        logger.with_context(action=action).debug("Action applied")
        return result
    finally:
        room_code_var.reset(room_token)
        player_id_var.reset(player_token)
