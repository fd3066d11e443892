"""
Logging Setup - Survey Scoring Engine
survey_scoring/core/logging_config.py

Routes structlog events through the stdlib logging module. The engine only
emits events; entry points (CLI, host services) call configure_logging().
"""

import logging
import sys
from typing import Optional

import structlog

from survey_scoring.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    """Configure structlog + stdlib logging from settings.

    Args:
        settings: Settings instance (defaults to the cached global settings).
        level: Optional level override, e.g. from a --log-level flag.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    if settings.LOG_FORMAT == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
