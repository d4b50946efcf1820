"""Form endpoints that add or remove a favorite and redirect back."""

from __future__ import annotations

import re

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse

from best_goats.exceptions import BadRequestError
from best_goats.schemas.catalog import MAX_ITEM_ID
from best_goats.services.dependencies import (
    get_app_settings,
    get_current_session_token,
    get_favorites_service,
)
from best_goats.services.favorites_service import FavoritesService, MutationOutcome, Rotated
from best_goats.session import set_session_cookie
from best_goats.settings import AppSettings

router = APIRouter()

_ITEM_ID_PATTERN = re.compile(r"\+?[0-9]+")


def parse_item_id(raw: str | None) -> int:
    """Validate the ``id`` form field as an unsigned 32-bit integer."""

    if raw is None:
        raise BadRequestError("Missing id parameter")
    if not _ITEM_ID_PATTERN.fullmatch(raw):
        raise BadRequestError("Invalid id parameter")
    item_id = int(raw)
    if item_id > MAX_ITEM_ID:
        raise BadRequestError("Invalid id parameter")
    return item_id


async def get_raw_item_id(request: Request) -> str | None:
    """Return the submitted ``id`` form field exactly as sent, ``""`` included."""

    form = await request.form()
    value = form.get("id")
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError("Invalid id parameter")
    return value


def _redirect_target(request: Request) -> str:
    """Return the ``Referer`` header when present, otherwise the request URL."""

    return request.headers.get("referer") or str(request.url)


def _redirect(
    request: Request, outcome: MutationOutcome, settings: AppSettings
) -> RedirectResponse:
    response = RedirectResponse(
        _redirect_target(request), status_code=status.HTTP_302_FOUND
    )
    if isinstance(outcome, Rotated):
        set_session_cookie(
            response,
            outcome.token,
            cookie_name=settings.session_cookie_name,
            max_age=settings.session_cookie_max_age_seconds,
        )
    return response


@router.post("/add-favorite")
async def add_favorite(
    request: Request,
    background_tasks: BackgroundTasks,
    raw_item_id: str | None = Depends(get_raw_item_id),
    token: str | None = Depends(get_current_session_token),
    service: FavoritesService = Depends(get_favorites_service),
    settings: AppSettings = Depends(get_app_settings),
) -> RedirectResponse:
    """Add ``id`` to the visitor's favorites, rotating the session token."""

    item_id = parse_item_id(raw_item_id)
    outcome = await service.add(token, item_id, cleanup=background_tasks)
    return _redirect(request, outcome, settings)


@router.post("/remove-favorite")
async def remove_favorite(
    request: Request,
    background_tasks: BackgroundTasks,
    raw_item_id: str | None = Depends(get_raw_item_id),
    token: str | None = Depends(get_current_session_token),
    service: FavoritesService = Depends(get_favorites_service),
    settings: AppSettings = Depends(get_app_settings),
) -> RedirectResponse:
    """Remove ``id`` from the visitor's favorites, rotating the session token."""

    item_id = parse_item_id(raw_item_id)
    outcome = await service.remove(token, item_id, cleanup=background_tasks)
    return _redirect(request, outcome, settings)
