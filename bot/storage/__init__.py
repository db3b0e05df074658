"""Data storage layer."""

from bot.storage.store import (
    MemoryTimeSeriesStore,
    RedisTimeSeriesStore,
    TimeSeriesStore,
    create_store,
)
from bot.storage.observation_recorder import ObservationRecorder
from bot.storage.performance_repo import PerformanceRepository

__all__ = [
    "TimeSeriesStore",
    "RedisTimeSeriesStore",
    "MemoryTimeSeriesStore",
    "create_store",
    "ObservationRecorder",
    "PerformanceRepository",
]
