"""Startup probes that surface store misconfiguration before the first request.

Warmup never blocks startup: failures are logged and the service starts
anyway, so a temporarily unreachable store only affects requests that need it.
"""

from __future__ import annotations

import logging
import time

from best_goats.exceptions import AppError
from best_goats.kv import KeyValueStore
from best_goats.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


async def warmup_store(name: str, store: KeyValueStore) -> bool:
    """Ping ``store`` and report whether it answered."""

    try:
        start = time.time()
        reachable = await store.ping()
        elapsed = (time.time() - start) * 1000
        if reachable:
            logger.info(f"✓ {name} store reachable ({elapsed:.0f}ms)")
        else:
            logger.warning(f"⚠ {name} store did not acknowledge ping")
        return reachable
    except AppError as e:
        logger.warning(f"{name} store warmup failed: {e}")
        return False


async def warmup_catalog(catalog_service: CatalogService) -> int | None:
    """Load the catalog once so decoding problems show up in the startup log."""

    try:
        start = time.time()
        catalog = await catalog_service.load_catalog()
        elapsed = (time.time() - start) * 1000
        logger.info(f"✓ Catalog loaded with {len(catalog)} items ({elapsed:.0f}ms)")
        return len(catalog)
    except AppError as e:
        logger.warning(f"Catalog warmup failed: {e}")
        return None


async def warmup_all(
    *,
    catalog_store: KeyValueStore,
    favorites_store: KeyValueStore,
    catalog_service: CatalogService,
) -> None:
    """Run every probe in sequence and log the total warmup time."""

    logger.info("=" * 60)
    logger.info("Warming up key-value stores...")
    logger.info("=" * 60)

    start = time.time()

    await warmup_store("Favorites", favorites_store)
    if await warmup_store("Catalog", catalog_store):
        await warmup_catalog(catalog_service)

    total_elapsed = (time.time() - start) * 1000
    logger.info("=" * 60)
    logger.info(f"✓ Warmup complete ({total_elapsed:.0f}ms)")
    logger.info("=" * 60)
