"""Bitvavo public REST client for order-book snapshots."""

from __future__ import annotations

import logging
from typing import Any

import httpx
import orjson

from core.errors import StoreUnavailable
from bot.storage.store import TimeSeriesStore

logger = logging.getLogger(__name__)

KEY_PREFIX_BOOK = "book:"

# Book snapshots go stale quickly
BOOK_CACHE_TTL = 10


class BitvavoRestClient:
    """Minimal Bitvavo REST client (public endpoints only)."""

    BASE_URL = "https://api.bitvavo.com/v2"

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.BASE_URL, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def get_book(self, market: str, depth: int) -> dict:
        """Order book ``{market, nonce, bids: [[price, volume]...], asks: [...]}``."""
        return await self._request("GET", f"/{market}/book", {"depth": depth})


class CachedBookSource:
    """Read-through cache of book snapshots in the shared store.

    With ``enabled=False`` every call goes to the exchange; fetched books
    are still written to the cache for other workers.
    """

    def __init__(
        self,
        client: BitvavoRestClient,
        store: TimeSeriesStore,
        depth: int,
        enabled: bool = False,
        ttl_seconds: int = BOOK_CACHE_TTL,
    ):
        self.client = client
        self.store = store
        self.depth = depth
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds

    async def get_book(self, market: str) -> dict:
        key = f"{KEY_PREFIX_BOOK}{market}"

        if self.enabled:
            cached = await self.store.get(key)
            if cached and "book" in cached:
                book = orjson.loads(cached["book"])
                logger.debug(
                    f"Book from cache - asks: {len(book['asks'])}, bids: {len(book['bids'])}"
                )
                return book

        book = await self.client.get_book(market, self.depth)
        logger.debug(f"Book from API - asks: {len(book['asks'])}, bids: {len(book['bids'])}")

        try:
            await self.store.put(key, {"book": orjson.dumps(book).decode()}, self.ttl_seconds)
        except StoreUnavailable as e:
            logger.warning(f"Book cache write failed: {e}")
        return book
