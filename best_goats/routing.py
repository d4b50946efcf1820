"""Method and path dispatch in front of the FastAPI routers.

Routes are matched on the first path segment, case-insensitively on both the
path and the method, and each is bound to exactly one method.  The middleware
rewrites the request to the canonical path and upper-case method before the
FastAPI routers see it, and answers unknown paths (404) and wrong methods
(405) itself with the HTML error page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from starlette.types import ASGIApp, Receive, Scope, Send

from best_goats.exceptions import AppError, MethodNotAllowedError, NotFoundError
from best_goats.rendering import PageRenderer
from best_goats.utils.error_responses import build_error_page, render_error_response

logger = logging.getLogger(__name__)


class Route(str, Enum):
    HOME = "home"
    FAVORITES = "favorites"
    ADD_FAVORITE = "add-favorite"
    REMOVE_FAVORITE = "remove-favorite"
    IMAGES = "images"


@dataclass(frozen=True, slots=True)
class RouteBinding:
    route: Route
    method: str
    path: str


# First path segment -> route binding. The home page is the empty segment.
ROUTE_TABLE: dict[str, RouteBinding] = {
    "": RouteBinding(Route.HOME, "GET", "/"),
    "favorites": RouteBinding(Route.FAVORITES, "GET", "/favorites"),
    "add-favorite": RouteBinding(Route.ADD_FAVORITE, "POST", "/add-favorite"),
    "remove-favorite": RouteBinding(Route.REMOVE_FAVORITE, "POST", "/remove-favorite"),
    "images": RouteBinding(Route.IMAGES, "GET", "/images"),
}


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    method: str
    path: str


def _first_segment(path: str) -> str:
    segments = path.split("/")
    return segments[1] if len(segments) > 1 else ""


def resolve_route(method: str, path: str) -> RouteMatch:
    """Return the canonical route for ``method`` and ``path``.

    Raises :class:`NotFoundError` for unrecognized paths and
    :class:`MethodNotAllowedError` when the path is known but bound to a
    different method.
    """

    segment = _first_segment(path)
    binding = ROUTE_TABLE.get(segment.lower())
    if binding is None:
        raise NotFoundError()
    if method.upper() != binding.method:
        raise MethodNotAllowedError(binding.method)

    canonical_path = binding.path
    if binding.route is Route.IMAGES:
        # Everything after the prefix is forwarded to the image origin as-is.
        remainder = path[len(segment) + 1 :]
        canonical_path = f"{binding.path}{remainder}"
    return RouteMatch(route=binding.route, method=binding.method, path=canonical_path)


class RouteDispatchMiddleware:
    """ASGI middleware applying :func:`resolve_route` to every HTTP request."""

    def __init__(self, app: ASGIApp, *, renderer: PageRenderer) -> None:
        self.app = app
        self.renderer = renderer

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            match = resolve_route(scope["method"], scope["path"])
        except AppError as exc:
            logger.info(
                "Rejected %s %s with %s", scope["method"], scope["path"], int(exc.status_code)
            )
            headers = None
            if isinstance(exc, MethodNotAllowedError):
                headers = {"Allow": exc.allowed_method}
            page = build_error_page(
                error_type=exc.error_type,
                status_code=int(exc.status_code),
                path=scope["path"],
                site_title=self.renderer.site_title,
            )
            response = render_error_response(self.renderer, page, headers=headers)
            await response(scope, receive, send)
            return

        scope = dict(scope, method=match.method, path=match.path)
        await self.app(scope, receive, send)


__all__ = [
    "ROUTE_TABLE",
    "Route",
    "RouteDispatchMiddleware",
    "RouteMatch",
    "RouteBinding",
    "resolve_route",
]
