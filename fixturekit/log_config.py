"""structlog setup for processes that host the fixture engine.

Call ``configure_logging()`` once at startup from the app that mounts the
fixture router. Test suites leave structlog unconfigured so that
``structlog.testing.capture_logs`` keeps seeing every event.
Library modules only ever call ``structlog.get_logger()``.
"""

from __future__ import annotations

import logging

import structlog

from fixturekit.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog with the level and renderer from settings."""
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
