"""Structured logging configuration using structlog.

Every line is one JSON object on stderr carrying ``service``, ``component``,
``level``, ``ts`` and the event text. uvicorn runs with ``log_config=None``;
third-party stdlib loggers are only level-filtered here.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

SERVICE_NAME = "podwatch"

# Chatty third-party loggers kept at WARNING unless debugging.
_NOISY_LOGGERS = ("uvicorn.error", "kubernetes_asyncio", "aiohttp.access")


def _add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: str = "info", stream: TextIO | None = None) -> None:
    """Configure structlog for JSON output, to stderr unless *stream* is given."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    out = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    third_party_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
