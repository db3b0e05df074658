"""Guess-ratio scoring over an observation history.

A guess is the signal of one observation checked against the realized move
to the next observation:

- BUY is correct when the price rose
- SELL is correct when the price fell
- HOLD is correct when the move stayed within ``max_difference_for_hold``

Pairs whose absolute relative move is below ``min_difference`` are noise and
are not counted at all.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import numpy as np

from core.errors import InvalidObservation
from core.models import (
    INSUFFICIENT_SAMPLES,
    EvaluationResult,
    HistorySummary,
    Observation,
    TradeSignal,
)

logger = logging.getLogger(__name__)


def price_change(current: Observation, following: Observation) -> float:
    """Relative mid-price move from ``current`` to ``following``."""
    if current.mid_price == 0 or not math.isfinite(current.mid_price):
        raise InvalidObservation(
            f"Cannot score from mid price {current.mid_price!r} "
            f"at {current.timestamp} ({current.instance_id})"
        )
    return (following.mid_price - current.mid_price) / current.mid_price


def is_correct_guess(
    signal: TradeSignal,
    change: float,
    max_difference_for_hold: float,
) -> bool:
    """Check one signal against the realized price change."""
    if signal == TradeSignal.BUY:
        return change > 0
    if signal == TradeSignal.SELL:
        return change < 0
    return abs(change) <= max_difference_for_hold


def score_observations(
    observations: Iterable[Observation],
    min_difference: float,
    max_difference_for_hold: float,
) -> EvaluationResult:
    """Compute the guess ratio for a set of observations.

    Observations are sorted by timestamp here; input order is irrelevant.

    Args:
        observations: One instance's observations, any order
        min_difference: Noise floor on abs(price change)
        max_difference_for_hold: Tolerance within which HOLD counts as correct

    Returns:
        EvaluationResult; (0.0, 0) when nothing could be checked

    Raises:
        InvalidObservation: a pair starts from a zero mid price
    """
    ordered = sorted(observations, key=lambda o: o.timestamp)
    if len(ordered) < 2:
        return INSUFFICIENT_SAMPLES

    checks = 0
    correct = 0
    skipped = 0

    for current, following in zip(ordered, ordered[1:]):
        change = price_change(current, following)

        if abs(change) < min_difference:
            skipped += 1
            logger.debug(
                f"Price change {change:.6f} below noise floor {min_difference} "
                f"at {current.timestamp}, skipping"
            )
            continue

        checks += 1
        if is_correct_guess(current.trade_signal, change, max_difference_for_hold):
            correct += 1

    if skipped:
        logger.warning(
            f"{skipped} of {len(ordered) - 1} pairs below minimum difference "
            f"for analysis ({min_difference}), skipped"
        )

    if checks == 0:
        return INSUFFICIENT_SAMPLES
    return EvaluationResult(guess_ratio=correct / checks, checks=checks)


def summarize_prices(observations: Iterable[Observation]) -> HistorySummary:
    """Moving average and volatility (population std dev) of mid prices."""
    prices = np.array([o.mid_price for o in observations], dtype=np.float64)
    if prices.size == 0:
        return HistorySummary(samples=0, moving_average=0.0, volatility=0.0)

    return HistorySummary(
        samples=int(prices.size),
        moving_average=float(np.mean(prices)),
        volatility=float(np.std(prices)),
    )
