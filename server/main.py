"""FastAPI server for the Papayoo card game.

Clients poll GET /api/game/state and send every action to
POST /api/game/{action}. All game state lives in the store behind
StateCache; the process itself keeps nothing between requests.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import config
from errors import GameError, GameValidationError, StoreUnavailableError
from handlers import HANDLERS, dispatch
from logging_config import setup_logging
from middleware.request_id import RequestIDMiddleware
from routers.health import router as health_router
from stores import StateCache, StoreProvider

# Configure logging based on environment
setup_logging(
    level=config.LOG_LEVEL,
    environment=config.ENVIRONMENT,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up the store provider on startup and close it on shutdown."""
    # A cache set before startup (tests) is kept as is
    if getattr(app.state, "cache", None) is None:
        provider = StoreProvider(redis_url=config.REDIS_URL)
        app.state.cache = StateCache(provider)
        if config.REDIS_URL:
            try:
                await app.state.cache.ping()
            except StoreUnavailableError as e:
                logger.warning(f"Redis not reachable at startup, will retry on demand: {e.message}")
        else:
            logger.warning("REDIS_URL not configured - using in-memory store (single process only)")

    logger.info(f"Papayoo server started (environment={config.ENVIRONMENT})")

    yield

    logger.info("Shutdown initiated...")
    try:
        await app.state.cache.provider.close()
    except StoreUnavailableError as e:
        logger.warning(f"Error closing store: {e.message}")
    logger.info("Shutdown complete")


app = FastAPI(
    title="Papayoo",
    debug=config.DEBUG,
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Middleware & Routers
# =============================================================================

app.add_middleware(RequestIDMiddleware)
app.include_router(health_router)


# =============================================================================
# Error Responses
# =============================================================================

def error_response(exc: GameError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()},
    )


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    if exc.retryable:
        logger.warning(f"{request.url.path}: {exc}")
    else:
        logger.info(f"{request.url.path} rejected: {exc}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return error_response(GameValidationError(f"Invalid request: {problems}"))


# =============================================================================
# Game API
# =============================================================================

@app.get("/api/game/state")
async def get_game_state(request: Request, room_code: str = "", player_id: Optional[str] = None):
    """Redacted game state for one seat (polled by clients)."""
    return await dispatch(
        "state",
        {"room_code": room_code, "player_id": player_id},
        request.app.state.cache,
    )


@app.post("/api/game/{action}")
async def game_action(action: str, request: Request, payload: Optional[dict] = Body(default=None)):
    """Apply one game action. See handlers.HANDLERS for the action names."""
    return await dispatch(action, payload, request.app.state.cache)


@app.get("/api/game")
async def list_actions():
    return {"actions": sorted(HANDLERS)}


def run():
    """Run the server using uvicorn."""
    import uvicorn

    logger.info(f"Starting Papayoo server on {config.HOST}:{config.PORT}")
    logger.info(f"Debug mode: {config.DEBUG}")

    uvicorn.run(
        "main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
