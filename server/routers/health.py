"""
Liveness and readiness probes.

/health answers as long as the process is up; /ready also pings the
game store behind app.state.cache.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from errors import StoreUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """503 with a "degraded" body while the store cannot be pinged."""
    cache = getattr(request.app.state, "cache", None)
    checks = {}
    healthy = True

    if cache is None:
        checks["store"] = {"status": "not_configured"}
        healthy = False
    else:
        try:
            await cache.ping()
            checks["store"] = {"status": "ok", "backend": cache.provider.backend}
        except StoreUnavailableError as e:
            logger.warning(f"Store health check failed: {e.message}")
            checks["store"] = {"status": "error", "message": e.message}
            healthy = False

    return JSONResponse(
        content={
            "status": "ok" if healthy else "degraded",
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        status_code=200 if healthy else 503,
    )
