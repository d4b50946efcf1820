"""FastAPI dependency wiring for the request handlers.

Process-wide collaborators (stores, renderer, HTTP client) are created once by
:func:`best_goats.main.create_app` and parked on ``app.state``.  The factories
below only look them up and wrap them in per-request services, keeping the
routers free of construction details.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Request

from best_goats.rendering import PageRenderer
from best_goats.services.catalog_service import CatalogService
from best_goats.services.favorites_service import FavoritesService
from best_goats.session import get_session_token
from best_goats.settings import AppSettings


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_page_renderer(request: Request) -> PageRenderer:
    return request.app.state.renderer


def get_image_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_current_session_token(
    request: Request, settings: AppSettings = Depends(get_app_settings)
) -> str | None:
    """Resolve the visitor's session token from the ``cookie`` header."""

    return get_session_token(request.headers, settings.session_cookie_name)


def get_favorites_service(
    request: Request, settings: AppSettings = Depends(get_app_settings)
) -> FavoritesService:
    return FavoritesService(
        request.app.state.favorites_store,
        token_length=settings.session_token_length,
    )


def get_catalog_service(
    request: Request, settings: AppSettings = Depends(get_app_settings)
) -> CatalogService:
    return CatalogService(request.app.state.catalog_store, catalog_key=settings.catalog_key)


__all__ = [
    "get_app_settings",
    "get_catalog_service",
    "get_current_session_token",
    "get_favorites_service",
    "get_image_client",
    "get_page_renderer",
]
