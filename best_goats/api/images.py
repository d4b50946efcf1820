"""Transparent pass-through of ``/images/*`` to the external image origin."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request, Response

from best_goats.exceptions import ImageProxyError
from best_goats.services.dependencies import get_app_settings, get_image_client
from best_goats.settings import AppSettings

logger = logging.getLogger(__name__)

router = APIRouter()

# Upstream headers worth relaying to the browser.
_FORWARDED_HEADERS: tuple[str, ...] = (
    "content-type",
    "cache-control",
    "etag",
    "last-modified",
    "expires",
)


def upstream_image_url(origin: str, path: str) -> str:
    """Append the request path verbatim to the configured image origin."""

    return f"{origin.rstrip('/')}{path}"


def verbatim_image_path(request: Request) -> str:
    """Return ``/images`` plus the still percent-encoded rest of the request path.

    The decoded ``scope["path"]`` would turn ``%3F`` or ``%23`` into a query or
    fragment delimiter upstream, so the remainder comes from ``raw_path``.
    """

    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return request.url.path
    raw = raw_path.decode("latin-1").split("?", 1)[0]
    _, separator, remainder = raw[1:].partition("/")
    return f"/images{separator}{remainder}"


@router.get("/images")
@router.get("/images/{image_path:path}")
async def proxy_image(
    request: Request,
    client: httpx.AsyncClient = Depends(get_image_client),
    settings: AppSettings = Depends(get_app_settings),
) -> Response:
    path = verbatim_image_path(request)
    url = upstream_image_url(settings.normalized_image_origin, path)
    try:
        upstream = await client.get(url, timeout=settings.image_proxy_timeout_seconds)
    except httpx.HTTPError as exc:
        logger.warning("Image fetch failed for %s: %s", path, exc)
        raise ImageProxyError() from exc

    headers = {
        name: upstream.headers[name]
        for name in _FORWARDED_HEADERS
        if name in upstream.headers
    }
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=headers,
    )
