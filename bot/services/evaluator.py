"""Guess-ratio evaluator backed by the time-series store.

Reads every observation of one instance, orders them by the millisecond
timestamp embedded in the key, and scores them with core.scoring. The
whole retention window is re-read on every call.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from core.errors import InvalidObservation
from core.models import EvaluationResult, HistorySummary, Observation
from core.scoring import score_observations, summarize_prices
from bot.storage.observation_recorder import instance_prefix, timestamp_from_key
from bot.storage.store import TimeSeriesStore

logger = logging.getLogger(__name__)


class GuessRatioEvaluator:
    """Scores one instance's observation history.

    Args:
        store: Shared time-series store
        min_difference: Noise floor (MINIMUM_DIFFERENCE_FOR_ANALYSIS)
        max_difference_for_hold: HOLD tolerance (MAX_DIFFERENCE_FOR_HOLD)
    """

    def __init__(
        self,
        store: TimeSeriesStore,
        min_difference: float,
        max_difference_for_hold: float,
    ):
        self.store = store
        self.min_difference = min_difference
        self.max_difference_for_hold = max_difference_for_hold

    async def load_history(self, instance_id: str) -> list[Observation]:
        """Fetch all live observations for ``instance_id``, oldest first.

        All hashes are fetched in one batch. Keys that expire between
        enumeration and fetch are skipped.

        Raises:
            StoreUnavailable: store error
            InvalidObservation: an entry cannot be parsed or dated
        """
        keys = await self.store.keys(instance_prefix(instance_id))
        if not keys:
            return []

        raw_entries = await self.store.get_many(keys)

        dated: list[tuple[int, Observation]] = []
        for key, fields in zip(keys, raw_entries):
            if fields is None:
                continue
            observation = Observation.from_fields(fields)
            timestamp = timestamp_from_key(key)
            if timestamp is None:
                timestamp = observation.timestamp
            if not timestamp:
                raise InvalidObservation(f"No usable timestamp for {key}")
            if timestamp != observation.timestamp:
                observation = replace(observation, timestamp=timestamp)
            dated.append((timestamp, observation))

        dated.sort(key=lambda item: item[0])
        return [observation for _, observation in dated]

    async def evaluate(self, instance_id: str) -> EvaluationResult:
        """Guess ratio and number of checked pairs for ``instance_id``.

        Raises:
            StoreUnavailable: store error
            InvalidObservation: malformed history or zero mid price
        """
        result, _ = await self.analyze(instance_id)
        return result

    async def summarize(self, instance_id: str) -> HistorySummary:
        """Moving average and volatility of the instance's mid prices."""
        return summarize_prices(await self.load_history(instance_id))

    async def analyze(self, instance_id: str) -> tuple[EvaluationResult, HistorySummary]:
        """Score and summarize from a single read of the history."""
        history = await self.load_history(instance_id)
        result = score_observations(
            history,
            min_difference=self.min_difference,
            max_difference_for_hold=self.max_difference_for_hold,
        )
        logger.debug(
            f"Evaluated {instance_id}: {len(history)} observations, "
            f"{result.checks} checks, ratio {result.guess_ratio:.4f}"
        )
        return result, summarize_prices(history)
