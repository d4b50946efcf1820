"""Pydantic schemas for stored records and rendered pages."""

from best_goats.schemas.catalog import (  # noqa: F401
    MAX_ITEM_ID,
    CatalogItem,
    ItemId,
    ItemListRow,
)
from best_goats.schemas.error import ErrorPage, ErrorType  # noqa: F401
from best_goats.schemas.pages import (  # noqa: F401
    CatalogPage,
    FavoritesPage,
    HomePage,
)
