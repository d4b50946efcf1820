"""Helper functions for constructing HTML error responses.

Every exception handler funnels through :func:`render_error_response`, so the
error page always carries the request ID, path and a timezone-aware timestamp,
and never touches catalog or favorites data.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime

from starlette.responses import HTMLResponse, PlainTextResponse, Response

from best_goats.exceptions import RenderError, canonical_status_message
from best_goats.rendering import PageRenderer
from best_goats.schemas.error import ErrorPage, ErrorType
from best_goats.settings import DEFAULT_SITE_TITLE
from best_goats.utils.request_context import get_request_id

__all__ = [
    "build_error_page",
    "render_error_response",
]

logger = logging.getLogger(__name__)


def _current_timestamp() -> datetime:
    """Return a timezone-aware timestamp for error pages.

    Tests monkeypatch this helper to pin the clock.
    """

    return datetime.now(UTC)


def build_error_page(
    *,
    error_type: ErrorType,
    status_code: int,
    message: str | None = None,
    path: str | None = None,
    site_title: str = DEFAULT_SITE_TITLE,
    request_id: str | None = None,
) -> ErrorPage:
    """Construct an :class:`ErrorPage` enriched with request metadata.

    ``message`` defaults to the canonical ``"<code> <reason>"`` text, which is
    also what the page title is built from.
    """

    status_text = canonical_status_message(status_code)
    return ErrorPage(
        error_type=error_type,
        title=f"{status_text} - {site_title}",
        message=message or status_text,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id() or None,
        path=path,
    )


def render_error_response(
    renderer: PageRenderer,
    page: ErrorPage,
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Render ``page`` as HTML, falling back to plain text if the template fails."""

    try:
        body = renderer.render_error(page)
    except RenderError:
        logger.error("Error page rendering failed; falling back to plain text")
        return PlainTextResponse(
            page.message, status_code=page.status_code, headers=headers
        )
    return HTMLResponse(body, status_code=page.status_code, headers=headers)
