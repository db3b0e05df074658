"""Order-book snapshot to trade signal.

Pure arithmetic on a ``{bids: [[price, volume]...], asks: [...]}`` book:
visible volume, market sentiment on a 0-100 scale, and the signal derived
from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from core.models import TradeSignal


@dataclass(slots=True, frozen=True)
class VisibleVolume:
    """Aggregates over the visible part of an order book."""

    bid_volume: float
    number_of_bids: int
    ask_volume: float
    number_of_asks: int
    mid_price: float
    weighted_average_price: float
    bid_ask_spread: float
    order_book_imbalance: float


@dataclass(slots=True, frozen=True)
class Sentiment:
    """Market sentiment derived from bid/ask volume share."""

    bid_volume_percentage: float
    market_sentiment: float


def _levels(orders: Sequence[Sequence[Any]]) -> np.ndarray:
    """Parse [[price, volume, ...], ...] into an (n, 2) float array."""
    if not orders:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([[float(o[0]), float(o[1])] for o in orders], dtype=np.float64)


def calculate_visible_volume(book: dict) -> VisibleVolume:
    """Summarize both sides of an order book.

    Raises:
        ValueError: one side of the book is empty
    """
    bids = _levels(book.get("bids", []))
    asks = _levels(book.get("asks", []))
    if bids.size == 0 or asks.size == 0:
        raise ValueError("Order book needs at least one bid and one ask")

    best_bid = float(bids[:, 0].max())
    best_ask = float(asks[:, 0].min())
    bid_volume = float(bids[:, 1].sum())
    ask_volume = float(asks[:, 1].sum())
    total = bid_volume + ask_volume

    def vwap(levels: np.ndarray) -> float:
        volume = levels[:, 1].sum()
        return float((levels[:, 0] * levels[:, 1]).sum() / volume) if volume else 0.0

    return VisibleVolume(
        bid_volume=round(bid_volume, 8),
        number_of_bids=len(bids),
        ask_volume=round(ask_volume, 8),
        number_of_asks=len(asks),
        mid_price=round((best_bid + best_ask) / 2, 2),
        weighted_average_price=round((vwap(bids) + vwap(asks)) / 2, 2),
        bid_ask_spread=round(best_ask - best_bid, 2),
        order_book_imbalance=round((bid_volume - ask_volume) / total, 4) if total else 0.0,
    )


def calculate_market_sentiment(volume: VisibleVolume) -> Sentiment:
    """Map bid volume share onto a 0-100 sentiment scale (50 = balanced)."""
    total = volume.bid_volume + volume.ask_volume
    bid_pct = (volume.bid_volume / total) * 100 if total else 50.0
    raw = (bid_pct - 50) * 2
    return Sentiment(
        bid_volume_percentage=round(bid_pct, 2),
        market_sentiment=round(max(0.0, min(100.0, 50 + raw)), 2),
    )


def calculate_trade_signal(
    sentiment: Sentiment,
    threshold: float,
    hold_band: float = 0.0,
) -> TradeSignal:
    """BUY above threshold, SELL below, HOLD within ``hold_band`` of it."""
    distance = sentiment.market_sentiment - threshold
    if hold_band > 0 and abs(distance) <= hold_band:
        return TradeSignal.HOLD
    if distance > 0:
        return TradeSignal.BUY
    return TradeSignal.SELL
