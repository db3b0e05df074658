"""Business logic services."""

from bot.services.evaluator import GuessRatioEvaluator
from bot.services.performance_recorder import PerformanceRecorder
from bot.services.cycle import CycleResult, TradingCycle

__all__ = [
    "GuessRatioEvaluator",
    "PerformanceRecorder",
    "TradingCycle",
    "CycleResult",
]
