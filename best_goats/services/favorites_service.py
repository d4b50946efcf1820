"""Rotating-token favorites sessions.

:class:`FavoritesService` is the only component with write side effects.  It
enforces three rules:

* Reading never creates state: without a token the list is simply empty.
* A mutation that changes the list writes it under a *new* token and only
  once that write succeeded schedules deletion of the old entry.  The delete
  runs detached from the response and its failure is only logged.
* A mutation that would not change the list (adding a present item, removing
  an absent one) touches neither the store nor the token.

Two concurrent mutations carrying the same old token both read the same list
and both write a new token; whichever ``Set-Cookie`` the browser keeps wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from fastapi import BackgroundTasks
from pydantic import TypeAdapter, ValidationError

from best_goats.exceptions import FavoritesDecodeError, FavoritesUpdateError, StoreError
from best_goats.kv import KeyValueStore
from best_goats.schemas.catalog import ItemId
from best_goats.session import generate_session_token
from best_goats.settings import DEFAULT_SESSION_TOKEN_LENGTH

logger = logging.getLogger(__name__)

_FAVORITES_ADAPTER: TypeAdapter[list[ItemId]] = TypeAdapter(list[ItemId])


@dataclass(frozen=True, slots=True)
class Unchanged:
    """The mutation was a no-op; no write happened and the token stays valid."""

    favorites: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Rotated:
    """The new list was durably written under ``token``."""

    token: str
    favorites: tuple[int, ...]


MutationOutcome = Unchanged | Rotated


def encode_favorites(favorites: Sequence[int]) -> bytes:
    """Serialize a favorites list as a compact UTF-8 JSON array."""

    return json.dumps(list(favorites), separators=(",", ":")).encode("utf-8")


def decode_favorites(payload: bytes) -> list[int]:
    """Parse a stored favorites record, rejecting anything but a list of ids."""

    try:
        favorites = _FAVORITES_ADAPTER.validate_json(payload, strict=True)
    except ValidationError as exc:
        raise FavoritesDecodeError() from exc

    # Records written by other tools may repeat ids; keep the first occurrence.
    return list(dict.fromkeys(favorites))


class FavoritesService:
    """Single source of truth for reading and mutating a favorites list."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        token_length: int = DEFAULT_SESSION_TOKEN_LENGTH,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._token_factory = token_factory or (
            lambda: generate_session_token(token_length)
        )

    async def current_favorites(self, token: str | None) -> list[int]:
        """Return the list stored under ``token``; empty when absent or unknown.

        Store failures propagate as :class:`StoreError`; they are never mistaken
        for an empty list.
        """

        if token is None:
            return []
        payload = await self._store.get(token)
        if payload is None:
            return []
        return decode_favorites(payload)

    async def add(
        self, token: str | None, item_id: int, *, cleanup: BackgroundTasks
    ) -> MutationOutcome:
        """Prepend ``item_id`` unless it is already a favorite."""

        favorites = await self.current_favorites(token)
        if item_id in favorites:
            return Unchanged(tuple(favorites))
        favorites.insert(0, item_id)
        return await self._rotate(token, favorites, cleanup)

    async def remove(
        self, token: str | None, item_id: int, *, cleanup: BackgroundTasks
    ) -> MutationOutcome:
        """Drop ``item_id`` while keeping the remaining order intact."""

        favorites = await self.current_favorites(token)
        if item_id not in favorites:
            return Unchanged(tuple(favorites))
        favorites.remove(item_id)
        return await self._rotate(token, favorites, cleanup)

    async def _rotate(
        self, old_token: str | None, favorites: list[int], cleanup: BackgroundTasks
    ) -> Rotated:
        new_token = self._token_factory()
        try:
            await self._store.put(new_token, encode_favorites(favorites))
        except StoreError as exc:
            logger.error("Failed to write rotated favorites list: %s", exc)
            raise FavoritesUpdateError() from exc

        if old_token is not None:
            cleanup.add_task(self.retire_token, old_token)
        logger.debug("Rotated favorites session (%d items)", len(favorites))
        return Rotated(token=new_token, favorites=tuple(favorites))

    async def retire_token(self, token: str) -> None:
        """Best-effort deletion of a superseded entry; never raises."""

        try:
            await self._store.delete(token)
        except StoreError as exc:
            logger.warning("Could not delete retired favorites entry: %s", exc)


__all__ = [
    "FavoritesService",
    "MutationOutcome",
    "Rotated",
    "Unchanged",
    "decode_favorites",
    "encode_favorites",
]
