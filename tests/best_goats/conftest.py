"""Shared fixtures: an in-memory app, a seeded catalog, and an ASGI client."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from best_goats.kv import InMemoryKeyValueStore
from best_goats.main import create_app
from best_goats.schemas.catalog import CatalogItem
from best_goats.services.catalog_service import encode_catalog
from best_goats.settings import AppSettings


@pytest.fixture
def catalog() -> list[CatalogItem]:
    """A small catalog whose order differs from id order."""

    return [
        CatalogItem(id=3, name="Billy", image="/images/billy.jpg", image_small="/images/billy_s.jpg"),
        CatalogItem(id=7, name="Nanny", image="/images/nanny.jpg", image_small="/images/nanny_s.jpg"),
        CatalogItem(id=1, name="Kid", image="/images/kid.jpg", image_small="/images/kid_s.jpg"),
        CatalogItem(id=12, name="Buck", image="/images/buck.jpg", image_small="/images/buck_s.jpg"),
    ]


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(store_backend="memory", image_origin="https://images.example.test/bucket")


@pytest.fixture
def favorites_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def catalog_store(catalog: list[CatalogItem]) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore({"featured": encode_catalog(catalog)})


@pytest.fixture
def app(
    settings: AppSettings,
    catalog_store: InMemoryKeyValueStore,
    favorites_store: InMemoryKeyValueStore,
) -> FastAPI:
    application = create_app(settings)
    application.state.catalog_store = catalog_store
    application.state.favorites_store = favorites_store
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
