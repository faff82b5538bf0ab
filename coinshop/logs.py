"""
Logging — structlog setup shared by every coinshop module.

    from coinshop import logs
    logs.configure("info")

    log = structlog.get_logger(__name__)
    log.info("bonus_claimed", user_id="u1", streak=3)
"""

from __future__ import annotations

import logging

import structlog

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def level_from_name(name: str) -> int:
    """Map a level name to its numeric value. Unknown names raise ValueError."""
    try:
        return _LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown log level: {name!r}") from None


def configure(level: str = "info", *, json: bool = True) -> None:
    """Configure structlog once at process start."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_from_name(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


__all__ = ("configure", "level_from_name")
