"""
Request ID middleware for request tracing.

Takes X-Request-ID from the client or generates one, binds it to the
logging context and echoes it on the response.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from logging_config import request_id_var

logger = logging.getLogger(__name__)


def _short_id() -> str:
    return uuid.uuid4().hex[:16]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to every HTTP request.

    - Reuses the incoming header when present
    - Stores it on request.state and in the logging context var
    - Logs method, path, status and duration at debug level
    """

    def __init__(
        self,
        app,
        header_name: str = "X-Request-ID",
        generator: Optional[Callable[[], str]] = None,
    ):
        super().__init__(app)
        self.header_name = header_name
        self.generator = generator or _short_id

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(self.header_name) or self.generator()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[self.header_name] = request_id
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({(time.perf_counter() - started) * 1000:.1f} ms)"
            )
            return response
        finally:
            request_id_var.reset(token)
