"""Template contexts for the two catalog pages."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

from best_goats.schemas.catalog import ItemListRow


class CatalogPage(BaseModel):
    """Fields shared by every page that lists catalog items."""

    template_name: ClassVar[str]

    title: str
    show_favorites: bool = True
    fav_count: int = Field(..., ge=0, description="Number of ids in the visitor's favorites")
    items: list[ItemListRow] = Field(default_factory=list)


class HomePage(CatalogPage):
    """All catalog items with the favorite flag marked."""

    template_name: ClassVar[str] = "home.html"


class FavoritesPage(CatalogPage):
    """Only the visitor's favorite items, in catalog order."""

    template_name: ClassVar[str] = "favorites.html"

    has_favorites: bool = False
