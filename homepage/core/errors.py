"""
Error types for the render pipeline and unified exception logging.

Each per-request error carries the HTTP status it maps to; the FastAPI
handlers in homepage.main turn them into plain-text responses. Template
load failures are startup errors and never reach a handler.

Usage:
    try:
        post = store.load(token)
    except PostDecodeError as exc:
        capture_exception(exc, context={"token": token})
        raise
"""

from typing import Optional, Any, Dict
import structlog

from homepage.core.context import get_context_dict

logger = structlog.get_logger(__name__)

__all__ = [
    "SiteError",
    "PostNotFoundError",
    "PostDecodeError",
    "RenderError",
    "TemplateLoadError",
    "capture_exception",
]


class SiteError(Exception):
    """Base class for errors raised by the site."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PostNotFoundError(SiteError):
    """The post file for a requested identifier could not be opened."""

    status_code = 404


class PostDecodeError(SiteError):
    """The post file opened but does not hold a valid post record."""

    status_code = 500


class RenderError(SiteError):
    """Template execution failed for a decoded post."""

    status_code = 500


class TemplateLoadError(SiteError):
    """The blog template is missing or does not parse. Fatal at startup."""


def capture_exception(
    exc: BaseException,
    context: Optional[Dict[str, Any]] = None,
    level: str = "error",
) -> None:
    """
    Log an exception with request context attached.

    Args:
        exc: Exception to capture
        context: Additional context dict (e.g., {"path": "db/post5.json"})
        level: Log level name (warning, error, critical)
    """
    enriched_context = {
        **get_context_dict(),
        "error_type": type(exc).__name__,
        **(context or {}),
    }

    log_func = getattr(logger, level, logger.error)
    log_func("Exception captured", exc_info=exc, **enriched_context)
