"""Key-value store capability shared by the catalog and favorites components.

Both stores expose the same tiny surface: ``get`` returning raw bytes (or
``None`` for a missing key), ``put`` and ``delete``.  The Redis implementation
keeps the two logical namespaces apart by prefixing keys, bounds every call by
a timeout, and converts any Redis failure into :class:`StoreError` so callers
only ever deal with the application's own exception taxonomy.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Protocol, TypeVar, runtime_checkable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from best_goats.exceptions import StoreError
from best_goats.settings import AppSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class KeyValueStore(Protocol):
    """Capability interface injected into the catalog and favorites services."""

    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes for ``key`` or ``None`` when the key is absent."""

    async def put(self, key: str, value: bytes) -> None:
        """Durably store ``value`` under ``key``."""

    async def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key is not an error."""

    async def ping(self) -> bool:
        """Return ``True`` when the backend is reachable."""


class RedisKeyValueStore:
    """Namespace view over a shared ``redis.asyncio`` client."""

    def __init__(self, redis: Redis, *, namespace: str, timeout: float) -> None:
        self._redis = redis
        self._namespace = namespace
        self._timeout = timeout

    @property
    def namespace(self) -> str:
        return self._namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def _call(self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError as exc:
            logger.warning(
                "Redis %s timed out after %.1fs for %s",
                operation,
                self._timeout,
                self._key(key),
            )
            raise StoreError() from exc
        except RedisError as exc:
            logger.warning("Redis %s failed for %s: %s", operation, self._key(key), exc)
            raise StoreError() from exc

    async def get(self, key: str) -> bytes | None:
        payload = await self._call("get", key, self._redis.get(self._key(key)))
        if payload is None:
            return None
        if isinstance(payload, str):
            return payload.encode("utf-8")
        return bytes(payload)

    async def put(self, key: str, value: bytes) -> None:
        await self._call("set", key, self._redis.set(self._key(key), value))

    async def delete(self, key: str) -> None:
        await self._call("delete", key, self._redis.delete(self._key(key)))

    async def ping(self) -> bool:
        return bool(await self._call("ping", "", self._redis.ping()))


class InMemoryKeyValueStore:
    """In-process store used for local development and the test-suite.

    Values live in a plain dictionary owned by the store instance, so every
    process (and every test) gets an isolated namespace.
    """

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def ping(self) -> bool:
        return True

    def snapshot(self) -> dict[str, bytes]:
        """Return a copy of every stored entry."""

        return dict(self._data)


def create_redis_client(redis_url: str) -> Redis:
    """Build a pooled Redis client; no connection is opened until first use."""

    return Redis.from_url(redis_url, decode_responses=False)


def build_stores(
    settings: AppSettings,
) -> tuple[KeyValueStore, KeyValueStore, Redis | None]:
    """Return ``(catalog_store, favorites_store, redis_client)`` for ``settings``.

    ``redis_client`` is ``None`` for the in-memory backend; otherwise it is the
    single pool both namespaces share and the caller owns closing it.
    """

    if settings.store_backend == "memory":
        logger.info("Using in-memory key-value stores")
        return InMemoryKeyValueStore(), InMemoryKeyValueStore(), None

    client = create_redis_client(settings.redis_url)
    catalog_store = RedisKeyValueStore(
        client,
        namespace=settings.catalog_namespace,
        timeout=settings.store_timeout_seconds,
    )
    favorites_store = RedisKeyValueStore(
        client,
        namespace=settings.favorites_namespace,
        timeout=settings.store_timeout_seconds,
    )
    return catalog_store, favorites_store, client


async def close_redis(client: Redis | None) -> None:
    """Close the shared Redis pool gracefully."""

    if client is None:
        return
    try:
        await client.aclose()
    except RedisError as exc:
        logger.warning("Error while closing Redis connection: %s", exc)


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "build_stores",
    "close_redis",
    "create_redis_client",
]
