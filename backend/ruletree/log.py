"""Structured logging setup shared by the engine modules."""

import logging

import structlog

from ruletree.config import get_settings


def configure_logging() -> None:
    """Configure structlog for the engine.

    JSON output by default, console rendering when ``RULETREE_DEBUG`` is set.
    Events below ``RULETREE_LOG_LEVEL`` are dropped.
    """
    settings = get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
