"""Exception taxonomy surfaced to visitors as HTML error pages.

Every exception carries the HTTP status it maps to and a human-readable
message.  The FastAPI exception handlers in :mod:`best_goats.main` render them
through the error template, so raising one of these from a route, service or
store wrapper is all a call site has to do.
"""

from __future__ import annotations

from http import HTTPStatus

from best_goats.schemas.error import ErrorType


class AppError(Exception):
    """Base class for every error the request handler knows how to render."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    default_message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message or canonical_status_message(self.status_code)
        super().__init__(self.message)


class BadRequestError(AppError):
    """Client-fixable problem with the submitted form data."""

    status_code = HTTPStatus.BAD_REQUEST
    error_type = ErrorType.BAD_REQUEST


class NotFoundError(AppError):
    status_code = HTTPStatus.NOT_FOUND
    error_type = ErrorType.NOT_FOUND


class MethodNotAllowedError(AppError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED
    error_type = ErrorType.METHOD_NOT_ALLOWED

    def __init__(self, allowed_method: str, message: str | None = None) -> None:
        self.allowed_method = allowed_method
        super().__init__(message)


class InternalError(AppError):
    """Failure of an external collaborator or of data it returned."""


class StoreError(InternalError):
    """A key-value store call failed for a reason other than a missing key."""

    default_message = "Error communicating with the data store"


class FavoritesDecodeError(InternalError):
    default_message = "Stored favorites could not be decoded"


class FavoritesUpdateError(InternalError):
    default_message = "Error updating favorites"


class CatalogUnavailableError(InternalError):
    default_message = "Couldn't load the catalog from the data store"


class CatalogDecodeError(InternalError):
    default_message = "The catalog record could not be decoded"


class RenderError(InternalError):
    default_message = "Error rendering page"


class ImageProxyError(InternalError):
    default_message = "Error fetching image"


def canonical_status_message(status_code: int) -> str:
    """Return ``"<code> <reason>"`` for ``status_code``, e.g. ``"404 Not Found"``."""

    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Unknown Error"
    return f"{int(status_code)} {phrase}"


__all__ = [
    "AppError",
    "BadRequestError",
    "CatalogDecodeError",
    "CatalogUnavailableError",
    "FavoritesDecodeError",
    "FavoritesUpdateError",
    "ImageProxyError",
    "InternalError",
    "MethodNotAllowedError",
    "NotFoundError",
    "RenderError",
    "StoreError",
    "canonical_status_message",
]
