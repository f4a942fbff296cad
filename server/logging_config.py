"""
Structured logging for the Papayoo game server.

Production emits one JSON object per line. Development prints a colored,
single-line format. Both attach the request/room/player/action context,
taken from the log record's ``extra`` or, failing that, from the context
vars set by the request middleware and the action dispatcher.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
room_code_var: ContextVar[Optional[str]] = ContextVar("room_code", default=None)
player_id_var: ContextVar[Optional[str]] = ContextVar("player_id", default=None)

# field name -> (context var, dev label, dev width)
CONTEXT_FIELDS = {
    "request_id": (request_id_var, "req", 8),
    "room_code": (room_code_var, "room", None),
    "player_id": (player_id_var, "player", 12),
    "action": (None, "action", None),
}


def collect_context(record: logging.LogRecord) -> dict[str, str]:
    """Context fields for a record; explicit extras win over context vars."""
    context = {}
    for name, (var, _, _) in CONTEXT_FIELDS.items():
        value = getattr(record, name, None)
        if not value and var is not None:
            value = var.get()
        if value:
            context[name] = str(value)
    return context


class JSONFormatter(logging.Formatter):
    """One JSON document per record, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **collect_context(record),
        }
        if record.levelno >= logging.ERROR:
            entry["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored level names with a bracketed context suffix."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        level = f"{color}{record.levelname:8}{self.RESET if color else ''}"
        clock = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        tags = []
        for name, value in collect_context(record).items():
            _, label, width = CONTEXT_FIELDS[name]
            tags.append(f"{label}={value[:width] if width else value}")
        suffix = f" [{' '.join(tags)}]" if tags else ""

        line = f"{clock} {level} {record.name}{suffix} - {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", environment: str = "development") -> None:
    """
    Install a single stdout handler on the root logger.

    ``environment == "production"`` selects JSON output; anything else gets
    the development formatter. Unknown level names fall back to INFO.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JSONFormatter() if environment == "production" else DevelopmentFormatter()
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for noisy in ("uvicorn.access", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging ready ({level}, {environment})")


class ContextLogger(logging.LoggerAdapter):
    """
    LoggerAdapter whose ``extra`` is merged into every record.

        logger = get_logger(__name__)
        logger.with_context(action="play_card").info("Card played")
    """

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def with_context(self, **fields) -> "ContextLogger":
        return ContextLogger(self.logger, {**self.extra, **fields})

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name))
