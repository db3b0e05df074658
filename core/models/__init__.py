"""Data models."""

from core.models.observation import Observation, TradeSignal
from core.models.performance import (
    INSUFFICIENT_SAMPLES,
    EvaluationResult,
    HistorySummary,
    PerformanceRecord,
)

__all__ = [
    "Observation",
    "TradeSignal",
    "EvaluationResult",
    "HistorySummary",
    "INSUFFICIENT_SAMPLES",
    "PerformanceRecord",
]
