"""HTML pages listing the catalog."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from best_goats.rendering import PageRenderer
from best_goats.services.catalog_service import CatalogService
from best_goats.services.dependencies import (
    get_catalog_service,
    get_current_session_token,
    get_favorites_service,
    get_page_renderer,
)
from best_goats.services.favorites_service import FavoritesService
from best_goats.services.view_builder import build_favorites_page, build_home_page

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def render_home(
    token: str | None = Depends(get_current_session_token),
    favorites_service: FavoritesService = Depends(get_favorites_service),
    catalog_service: CatalogService = Depends(get_catalog_service),
    renderer: PageRenderer = Depends(get_page_renderer),
) -> HTMLResponse:
    """Every catalog item, with the visitor's favorites marked."""

    favorites = await favorites_service.current_favorites(token)
    catalog = await catalog_service.load_catalog()
    logger.debug("Rendering home with %d favorites", len(favorites))
    page = build_home_page(catalog, favorites, site_title=renderer.site_title)
    return renderer.page_response(page)


@router.get("/favorites", response_class=HTMLResponse)
async def render_favorites(
    token: str | None = Depends(get_current_session_token),
    favorites_service: FavoritesService = Depends(get_favorites_service),
    catalog_service: CatalogService = Depends(get_catalog_service),
    renderer: PageRenderer = Depends(get_page_renderer),
) -> HTMLResponse:
    """Only the visitor's favorites, in catalog order."""

    favorites = await favorites_service.current_favorites(token)
    catalog = await catalog_service.load_catalog()
    page = build_favorites_page(catalog, favorites, site_title=renderer.site_title)
    return renderer.page_response(page)
