"""
Structured logging configuration using structlog.

JSON output when HOMEPAGE_ENV=production (for log shipping), colored console
output otherwise. Plain stdlib loggers (uvicorn, our own module loggers) are
routed to stdout with the same level.

Usage:
    from homepage.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("post decoded", number=5, path="db/post5.json")

Output in development:
    2024-01-01T12:00:00Z [info     ] post decoded    number=5 path=db/post5.json
"""

import logging
import os
import sys
from typing import Any

import structlog

IS_PRODUCTION = os.getenv("HOMEPAGE_ENV") == "production"
IS_TEST = "pytest" in sys.modules


def configure_logging() -> None:
    """Configure structlog with appropriate processors for the environment."""

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if IS_PRODUCTION:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=not IS_TEST),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
        level=logging.INFO,
    )

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


# Configure on import
configure_logging()
