"""Loading the read-only catalog from its key-value namespace."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import msgpack
from pydantic import ValidationError

from best_goats.exceptions import CatalogDecodeError, CatalogUnavailableError
from best_goats.kv import KeyValueStore
from best_goats.schemas.catalog import CatalogItem

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_KEY = "featured"

# Wire order when an item is packed as a positional array.
_POSITIONAL_FIELDS: tuple[str, ...] = ("id", "name", "image", "imageSmall")


def _coerce_item(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) != len(_POSITIONAL_FIELDS):
            raise CatalogDecodeError()
        return dict(zip(_POSITIONAL_FIELDS, raw))
    raise CatalogDecodeError()


def decode_catalog(payload: bytes) -> list[CatalogItem]:
    """Decode a MessagePack catalog record into :class:`CatalogItem` models.

    Items may be packed either as maps keyed by field name (``imageSmall`` for
    the small image) or as positional arrays in that same field order.
    """

    try:
        raw_items = msgpack.unpackb(payload, raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as exc:
        raise CatalogDecodeError() from exc

    if not isinstance(raw_items, list):
        raise CatalogDecodeError()

    try:
        return [CatalogItem.model_validate(_coerce_item(raw)) for raw in raw_items]
    except ValidationError as exc:
        raise CatalogDecodeError() from exc


def encode_catalog(items: Sequence[CatalogItem]) -> bytes:
    """Pack ``items`` in the map form :func:`decode_catalog` accepts."""

    return msgpack.packb([item.model_dump(by_alias=True) for item in items])


class CatalogService:
    """Read side of the catalog namespace."""

    def __init__(self, store: KeyValueStore, *, catalog_key: str = DEFAULT_CATALOG_KEY) -> None:
        self._store = store
        self._catalog_key = catalog_key

    async def load_catalog(self) -> list[CatalogItem]:
        payload = await self._store.get(self._catalog_key)
        if payload is None:
            logger.error("Catalog record %r is missing", self._catalog_key)
            raise CatalogUnavailableError()
        try:
            return decode_catalog(payload)
        except CatalogDecodeError:
            logger.error("Catalog record %r could not be decoded", self._catalog_key)
            raise


__all__ = [
    "CatalogService",
    "DEFAULT_CATALOG_KEY",
    "decode_catalog",
    "encode_catalog",
]
