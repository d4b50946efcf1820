"""Tests for the startup store probes."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from best_goats.exceptions import CatalogDecodeError, StoreError
from best_goats.kv import InMemoryKeyValueStore
from best_goats.schemas.catalog import CatalogItem
from best_goats.services.catalog_service import CatalogService, encode_catalog
from best_goats.warmup import warmup_all, warmup_catalog, warmup_store


@pytest.mark.asyncio
async def test_warmup_store_reports_reachable_store(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO):
        assert await warmup_store("Favorites", InMemoryKeyValueStore()) is True

    assert "Favorites store reachable" in caplog.text


@pytest.mark.asyncio
async def test_warmup_store_swallows_store_errors(caplog: pytest.LogCaptureFixture) -> None:
    store = AsyncMock()
    store.ping.side_effect = StoreError()

    with caplog.at_level(logging.WARNING):
        assert await warmup_store("Catalog", store) is False

    assert "Catalog store warmup failed" in caplog.text


@pytest.mark.asyncio
async def test_warmup_catalog_counts_items(catalog: list[CatalogItem]) -> None:
    service = CatalogService(InMemoryKeyValueStore({"featured": encode_catalog(catalog)}))

    assert await warmup_catalog(service) == len(catalog)


@pytest.mark.asyncio
async def test_warmup_catalog_logs_decode_failures(caplog: pytest.LogCaptureFixture) -> None:
    service = AsyncMock()
    service.load_catalog.side_effect = CatalogDecodeError()

    with caplog.at_level(logging.WARNING):
        assert await warmup_catalog(service) is None

    assert "Catalog warmup failed" in caplog.text


@pytest.mark.asyncio
async def test_warmup_all_skips_catalog_when_store_is_down() -> None:
    catalog_store = AsyncMock()
    catalog_store.ping.return_value = False
    catalog_service = AsyncMock()

    await warmup_all(
        catalog_store=catalog_store,
        favorites_store=InMemoryKeyValueStore(),
        catalog_service=catalog_service,
    )

    catalog_service.load_catalog.assert_not_called()
