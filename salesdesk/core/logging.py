"""structlog configuration: console output in development, JSON in production."""

import logging

import structlog

from salesdesk.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog processors based on environment."""
    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO
    logging.basicConfig(format="%(message)s", level=level)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.APP_ENV == "production":
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
