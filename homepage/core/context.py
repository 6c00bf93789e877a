"""
Request context management for log correlation.

Holds the current request id in a ContextVar so logs and error reports
emitted anywhere in the render pipeline can be tied back to one request.

Usage:
    # In middleware (automatic)
    set_request_id(generate_request_id())

    # In error handlers
    capture_exception(exc, context={"request_id": get_request_id()})
"""

from contextvars import ContextVar
from typing import Optional
import uuid

__all__ = [
    "set_request_id",
    "get_request_id",
    "generate_request_id",
    "clear_context",
    "get_context_dict",
]

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """
    Generate a new request ID.

    Format: req_{16 hex chars}
    """
    return f"req_{uuid.uuid4().hex[:16]}"


def set_request_id(request_id: str) -> None:
    """Set request ID for current async context."""
    _request_id.set(request_id)


def get_request_id() -> Optional[str]:
    """Get request ID from current async context."""
    return _request_id.get()


def clear_context() -> None:
    """Clear context at the end of a request."""
    _request_id.set(None)


def get_context_dict() -> dict:
    return {"request_id": get_request_id()}
