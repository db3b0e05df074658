"""Tests for the cached order-book source."""

import pytest
from unittest.mock import AsyncMock, MagicMock

import orjson

from bot.clients import CachedBookSource
from bot.storage.store import MemoryTimeSeriesStore
from core.errors import StoreUnavailable


BOOK = {"market": "BTC-EUR", "bids": [["100", "1"]], "asks": [["101", "2"]]}


@pytest.fixture
def client():
    client = MagicMock()
    client.get_book = AsyncMock(return_value=BOOK)
    return client


class TestCachedBookSource:
    @pytest.mark.asyncio
    async def test_disabled_always_fetches_but_fills_cache(self, client):
        store = MemoryTimeSeriesStore()
        source = CachedBookSource(client, store, depth=25)

        await source.get_book("BTC-EUR")
        await source.get_book("BTC-EUR")

        assert client.get_book.await_count == 2
        client.get_book.assert_awaited_with("BTC-EUR", 25)
        cached = await store.get("book:BTC-EUR")
        assert orjson.loads(cached["book"]) == BOOK

    @pytest.mark.asyncio
    async def test_enabled_serves_from_cache(self, client):
        store = MemoryTimeSeriesStore()
        source = CachedBookSource(client, store, depth=25, enabled=True)

        first = await source.get_book("BTC-EUR")
        second = await source.get_book("BTC-EUR")

        assert first == second == BOOK
        assert client.get_book.await_count == 1

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_returns_book(self, client):
        store = MagicMock()
        store.get = AsyncMock(return_value=None)
        store.put = AsyncMock(side_effect=StoreUnavailable("down"))
        source = CachedBookSource(client, store, depth=25, enabled=True)

        assert await source.get_book("BTC-EUR") == BOOK
