"""
Structured logging for Cadence using structlog wrapping stdlib.

Log lines go through one handler on the "cadence" logger, so embedding the
engine in another application leaves that application's root logger alone.
Every event carries the component that emitted it (history, learning,
suggestions, engagement, focus, dashboard) and, once bound, the user whose
history is being analysed.

Environment:
    CADENCE_LOG_LEVEL   DEBUG, INFO, WARNING, ... (default INFO)
    CADENCE_LOG_FORMAT  "json" for JSON lines, console output otherwise

Usage:
    from cadence.logging_config import bind_user, get_logger, setup_logging

    setup_logging()
    bind_user("alice")
    get_logger(__name__).info("snapshot_refreshed", completions=12)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


LOGGER_NAMESPACE = "cadence"

# Chatty third-party loggers held at WARNING unless running at DEBUG
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def add_component(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Derive the component from the logger name: cadence.engagement.nudges -> engagement."""
    name = event_dict.get("logger") or ""
    parts = name.split(".")
    if len(parts) > 1 and parts[0] == LOGGER_NAMESPACE:
        event_dict.setdefault("component", parts[1])
    return event_dict


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    if level is None:
        level = os.environ.get("CADENCE_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("CADENCE_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_component,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    project_logger = logging.getLogger(LOGGER_NAMESPACE)
    project_logger.handlers.clear()
    project_logger.addHandler(handler)
    project_logger.setLevel(numeric_level)
    project_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_user(user_id: str) -> None:
    """Attach the active user to every log line emitted in this context."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def unbind_user() -> None:
    structlog.contextvars.unbind_contextvars("user_id")


@contextmanager
def user_context(user_id: str) -> Iterator[None]:
    """Bind the user for the duration of a block, e.g. one CLI command."""
    bind_user(user_id)
    try:
        yield
    finally:
        unbind_user()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["add_component", "bind_user", "get_logger", "setup_logging", "unbind_user", "user_context"]
