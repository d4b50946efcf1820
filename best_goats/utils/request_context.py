"""Request-scoped identifiers for log correlation.

Each inbound request gets a UUID from the middleware in :mod:`best_goats.main`.
The value lives in a ``ContextVar`` so every coroutine serving that request,
including the detached cleanup task, sees the same identifier without any
shared mutable state between requests.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token

__all__ = [
    "REQUEST_ID_CONTEXT",
    "RequestIdLogFilter",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]

REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Store ``request_id`` for the active context and return the reset token."""

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Return the active request identifier, or ``""`` outside a request."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    """Restore the previous identifier (with ``token``) or blank it out."""

    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")


class RequestIdLogFilter(logging.Filter):
    """Expose the active request identifier as ``%(request_id)s`` on log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True
