"""
structlog configuration for applications running railtrack pipelines.

railtrack modules only ever call structlog.get_logger(); nothing is printed
in a particular shape until the application calls configure_structlog once
at startup.
"""

from __future__ import annotations

from typing import Optional

import structlog

from railtrack.config import RailtrackSettings


def configure_structlog(settings: Optional[RailtrackSettings] = None) -> None:
    """
    Configure structlog processors and level filtering from settings.

    console: colored, human-readable lines for development.
    json: one JSON object per line for log shippers.
    """
    settings = settings or RailtrackSettings()
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_number),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
