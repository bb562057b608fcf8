"""structlog configuration for processes embedding the registry."""

from __future__ import annotations

import logging

import structlog

from watchgit.config import RegistrySettings


def configure_logging(settings: RegistrySettings | None = None) -> None:
    """Configure structlog with a level filter and a console or JSON renderer.

    Library modules only call ``structlog.get_logger``; the embedding
    process decides when to call this.
    """
    settings = settings or RegistrySettings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
