"""Joining the catalog with a visitor's favorites into page contexts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from best_goats.schemas.catalog import CatalogItem, ItemListRow
from best_goats.schemas.pages import FavoritesPage, HomePage


def build_item_rows(
    catalog: Iterable[CatalogItem], favorites: Iterable[int]
) -> list[ItemListRow]:
    """Return one row per catalog item, in catalog order, with the favorite flag set."""

    favorite_ids = set(favorites)
    return [
        ItemListRow.from_item(item, is_favorite=item.id in favorite_ids)
        for item in catalog
    ]


def favorite_item_rows(
    catalog: Iterable[CatalogItem], favorites: Iterable[int]
) -> list[ItemListRow]:
    """Return only the favorited catalog items.

    Rows keep catalog order rather than favorite recency.  Favorites that no
    longer exist in the catalog are silently absent.
    """

    favorite_ids = set(favorites)
    return [
        ItemListRow.from_item(item, is_favorite=True)
        for item in catalog
        if item.id in favorite_ids
    ]


def build_home_page(
    catalog: Sequence[CatalogItem], favorites: Sequence[int], *, site_title: str
) -> HomePage:
    return HomePage(
        title=site_title,
        fav_count=len(favorites),
        items=build_item_rows(catalog, favorites),
    )


def build_favorites_page(
    catalog: Sequence[CatalogItem], favorites: Sequence[int], *, site_title: str
) -> FavoritesPage:
    return FavoritesPage(
        title=f"Favorites - {site_title}",
        fav_count=len(favorites),
        has_favorites=len(favorites) > 0,
        items=favorite_item_rows(catalog, favorites),
    )


__all__ = [
    "build_favorites_page",
    "build_home_page",
    "build_item_rows",
    "favorite_item_rows",
]
