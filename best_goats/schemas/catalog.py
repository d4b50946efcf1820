"""Pydantic schemas describing catalog records and the rows shown to visitors."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

MAX_ITEM_ID = 2**32 - 1

ItemId = Annotated[int, Field(ge=0, le=MAX_ITEM_ID)]
"""Stable unsigned 32-bit identifier of a catalog entry."""


class CatalogItem(BaseModel):
    """A single catalog entry as stored in the catalog namespace.

    The stored record names the small-image URL ``imageSmall``; the alias keeps
    that wire name while Python code uses ``image_small``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: ItemId
    name: str
    image: str
    image_small: str = Field(..., alias="imageSmall")


class ItemListRow(BaseModel):
    """View-ready catalog row with the visitor's favorite flag merged in."""

    model_config = ConfigDict(frozen=True)

    id: ItemId
    name: str
    image: str
    image_small: str
    is_favorite: bool

    @classmethod
    def from_item(cls, item: CatalogItem, *, is_favorite: bool) -> ItemListRow:
        return cls(
            id=item.id,
            name=item.name,
            image=item.image,
            image_small=item.image_small,
            is_favorite=is_favorite,
        )
