"""Structured logging for the room board.

Board events go through structlog and end up on stdlib logging, so the
board and its libraries (httpx, redis) share one stdout handler.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from roomboard.config.settings import settings

# Library loggers that are too chatty below WARNING
QUIET_LOGGERS = ("httpcore", "httpx", "redis")

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def add_room_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Prefix the event with [room_id] when a room is bound.

    Mutations bind room_id, so every line about one room's check-in,
    checkout or payment starts with the same tag in JSON and console output.
    """
    room_id = event_dict.get("room_id")
    if room_id:
        event_dict["event"] = f"[{room_id}] {event_dict.get('event', '')}"
    return event_dict


def _build_handler(fmt: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.setLevel(level)
    return handler


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog and the root logger.

    Args:
        level: Log level name; defaults to LOG_LEVEL
        fmt: "json" or "console"; defaults to LOG_FORMAT
    """
    level_name = (level or settings.logging.level).upper()
    fmt = fmt or settings.logging.format
    log_level = getattr(logging, level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_build_handler(fmt, log_level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_room_prefix,
            _renderer(fmt),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a board logger, typically for __name__."""
    return structlog.get_logger(name)
