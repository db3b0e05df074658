"""Observation model: one worker's signal and price for one trading cycle.

Observations live in the time-series store as flat string hashes, so the
field map uses camelCase names and every value is a string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.errors import InvalidObservation


class TradeSignal(str, Enum):
    """Trade signal produced once per cycle."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(slots=True, frozen=True)
class Observation:
    """Immutable record of one cycle's signal and market state."""

    instance_id: str
    timestamp: int  # Unix epoch milliseconds
    mid_price: float
    trade_signal: TradeSignal
    bid_volume: float = 0.0
    ask_volume: float = 0.0
    number_of_bids: int = 0
    number_of_asks: int = 0
    market_sentiment: float = 0.0
    bid_volume_percentage: float = 0.0
    sentiment_threshold: float = 0.0
    order_book_depth: int = 0

    def to_fields(self) -> dict[str, str]:
        """Serialize to a store hash."""
        return {
            "instanceId": self.instance_id,
            "timestamp": str(self.timestamp),
            "midPrice": repr(self.mid_price),
            "tradeSignal": self.trade_signal.value,
            "bidVolume": repr(self.bid_volume),
            "askVolume": repr(self.ask_volume),
            "numberOfBids": str(self.number_of_bids),
            "numberOfAsks": str(self.number_of_asks),
            "marketSentiment": repr(self.market_sentiment),
            "bidVolumePercentage": repr(self.bid_volume_percentage),
            "sentimentThreshold": repr(self.sentiment_threshold),
            "orderBookDepth": str(self.order_book_depth),
        }

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> Observation:
        """Parse a store hash.

        Only midPrice and tradeSignal are required for scoring; the
        volumetric fields fall back to zero when absent.

        Raises:
            InvalidObservation: required fields missing or unparsable
        """
        try:
            return cls(
                instance_id=fields.get("instanceId", ""),
                timestamp=int(fields.get("timestamp", 0)),
                mid_price=float(fields["midPrice"]),
                trade_signal=TradeSignal(fields["tradeSignal"]),
                bid_volume=float(fields.get("bidVolume", 0)),
                ask_volume=float(fields.get("askVolume", 0)),
                number_of_bids=int(fields.get("numberOfBids", 0)),
                number_of_asks=int(fields.get("numberOfAsks", 0)),
                market_sentiment=float(fields.get("marketSentiment", 0)),
                bid_volume_percentage=float(fields.get("bidVolumePercentage", 0)),
                sentiment_threshold=float(fields.get("sentimentThreshold", 0)),
                order_book_depth=int(fields.get("orderBookDepth", 0)),
            )
        except (KeyError, ValueError) as e:
            raise InvalidObservation(f"Malformed observation {fields!r}: {e}") from e
