"""Time-series store adapter.

Contract over a shared key-value store with per-key expiry:

- ``put(key, fields, ttl_seconds)``: write a flat hash with a TTL
- ``get(key)``: the hash, or None if absent / expired
- ``get_many(keys)``: the hashes of several keys in one round-trip
- ``keys(prefix)``: keys currently starting with ``prefix``

Expiry is enforced by the store. Enumeration is not synchronous with
expiry, so a key returned by ``keys`` may already be gone on ``get``.

Backends:
- RedisTimeSeriesStore: redis.asyncio, shared by all workers
- MemoryTimeSeriesStore: in-process, for tests and single-worker runs
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from core.errors import StoreUnavailable

logger = logging.getLogger(__name__)

MEMORY_URL_SCHEME = "memory://"


class TimeSeriesStore(Protocol):
    """Store contract used by the recorder and evaluator."""

    async def put(self, key: str, fields: dict[str, str], ttl_seconds: int) -> None: ...

    async def get(self, key: str) -> dict[str, str] | None: ...

    async def get_many(self, keys: list[str]) -> list[dict[str, str] | None]: ...

    async def keys(self, prefix: str) -> list[str]: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


def _decode_hash(raw: dict | None) -> dict[str, str] | None:
    # Redis returns an empty hash for a missing key
    if not raw:
        return None
    return {_decode(k): _decode(v) for k, v in raw.items()}


class RedisTimeSeriesStore:
    """Redis-backed store. Every RedisError surfaces as StoreUnavailable."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, max_connections: int = 10) -> RedisTimeSeriesStore:
        """Create a store with its own connection pool."""
        pool = ConnectionPool.from_url(url, max_connections=max_connections)
        return cls(redis.Redis(connection_pool=pool))

    async def ping(self) -> bool:
        try:
            return await self._client.ping()
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis PING failed: {e}") from e

    async def put(self, key: str, fields: dict[str, str], ttl_seconds: int) -> None:
        """HSET + EXPIRE in one transaction."""
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=fields)
                pipe.expire(key, ttl_seconds)
                await pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis write failed for {key}: {e}") from e

    async def get(self, key: str) -> dict[str, str] | None:
        try:
            raw = await self._client.hgetall(key)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis read failed for {key}: {e}") from e

        return _decode_hash(raw)

    async def get_many(self, keys: list[str]) -> list[dict[str, str] | None]:
        """HGETALL for every key on one connection, in one round-trip."""
        if not keys:
            return []
        try:
            async with self._client.pipeline(transaction=False) as pipe:
                for key in keys:
                    pipe.hgetall(key)
                raw_entries = await pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis read failed for {len(keys)} keys: {e}") from e

        return [_decode_hash(raw) for raw in raw_entries]

    async def keys(self, prefix: str) -> list[str]:
        """SCAN-based enumeration (never KEYS)."""
        try:
            return [
                _decode(key)
                async for key in self._client.scan_iter(match=f"{prefix}*", count=500)
            ]
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis SCAN failed for {prefix}*: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed")


class MemoryTimeSeriesStore:
    """In-process store with lazy TTL expiry.

    Args:
        clock: Returns the current time in seconds (injectable for tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[float, dict[str, str]]] = {}

    def _expired(self, key: str) -> bool:
        expires_at, _ = self._data[key]
        if self._clock() >= expires_at:
            del self._data[key]
            return True
        return False

    async def put(self, key: str, fields: dict[str, str], ttl_seconds: int) -> None:
        self._data[key] = (self._clock() + ttl_seconds, dict(fields))

    async def get(self, key: str) -> dict[str, str] | None:
        if key not in self._data or self._expired(key):
            return None
        return dict(self._data[key][1])

    async def get_many(self, keys: list[str]) -> list[dict[str, str] | None]:
        return [await self.get(key) for key in keys]

    async def ping(self) -> bool:
        return True

    async def keys(self, prefix: str) -> list[str]:
        return [
            key for key in list(self._data)
            if key.startswith(prefix) and not self._expired(key)
        ]

    async def close(self) -> None:
        self._data.clear()


def create_store(url: str) -> TimeSeriesStore:
    """Pick a backend from the URL (``memory://`` or a redis URL)."""
    if url.startswith(MEMORY_URL_SCHEME):
        logger.warning("Using in-process memory store; observations are not shared")
        return MemoryTimeSeriesStore()
    return RedisTimeSeriesStore.from_url(url)
