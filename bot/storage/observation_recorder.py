"""Signal observation recorder.

One observation per trading cycle per worker:
- observation:{instance_id}:{timestamp_ms} -> hash (see Observation.to_fields)

Single write, no read-modify-write. Keys rely on millisecond timestamps
being unique within one worker; cycle intervals are far longer than that.
"""

from __future__ import annotations

import logging

from core.errors import StoreUnavailable
from core.models import Observation
from bot.storage.store import TimeSeriesStore

logger = logging.getLogger(__name__)

KEY_PREFIX_OBSERVATION = "observation:"


def instance_prefix(instance_id: str) -> str:
    """Key prefix covering every observation of one instance."""
    return f"{KEY_PREFIX_OBSERVATION}{instance_id}:"


def observation_key(instance_id: str, timestamp_ms: int) -> str:
    return f"{instance_prefix(instance_id)}{timestamp_ms}"


def timestamp_from_key(key: str) -> int | None:
    """Millisecond timestamp embedded in an observation key."""
    _, _, suffix = key.rpartition(":")
    try:
        return int(suffix)
    except ValueError:
        return None


class ObservationRecorder:
    """Writes observations with the configured retention."""

    def __init__(self, store: TimeSeriesStore, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def record(self, instance_id: str, observation: Observation) -> str:
        """Persist one observation.

        Returns:
            The key written

        Raises:
            StoreUnavailable: the write failed; the cycle's data is lost
        """
        key = observation_key(instance_id, observation.timestamp)
        try:
            await self.store.put(key, observation.to_fields(), self.ttl_seconds)
        except StoreUnavailable as e:
            logger.error(f"Failed to record observation {key}: {e}")
            raise
        logger.debug(f"Recorded {key} ({observation.trade_signal.value} @ {observation.mid_price})")
        return key
