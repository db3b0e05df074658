"""Trading cycle for one worker.

Strictly sequential per tick:
fetch book -> signal -> record observation -> evaluate -> record performance
-> trade hook -> sleep until the next fixed tick.

A failed tick is logged and the loop carries on; the next tick retries
naturally. A tick lost to a crash or shutdown is just a gap in the history.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from core.errors import InvalidObservation, StoreUnavailable
from core.market import (
    calculate_market_sentiment,
    calculate_trade_signal,
    calculate_visible_volume,
)
from core.models import EvaluationResult, Observation, TradeSignal
from bot.clients.bitvavo_rest import CachedBookSource
from bot.context import WorkerContext
from bot.services.evaluator import GuessRatioEvaluator
from bot.services.performance_recorder import PerformanceRecorder
from bot.storage.observation_recorder import ObservationRecorder

logger = logging.getLogger(__name__)

TradeHook = Callable[[TradeSignal, float], Awaitable[None]]


async def no_trade(signal: TradeSignal, mid_price: float) -> None:
    """Default trade hook: order placement is handled elsewhere."""


@dataclass(slots=True)
class CycleResult:
    observation: Observation
    evaluation: EvaluationResult | None


class TradingCycle:
    """One worker's trading loop."""

    def __init__(
        self,
        context: WorkerContext,
        books: CachedBookSource,
        recorder: ObservationRecorder,
        evaluator: GuessRatioEvaluator,
        performance: PerformanceRecorder,
        trade: TradeHook = no_trade,
        clock: Callable[[], float] = time.time,
    ):
        self.context = context
        self.books = books
        self.recorder = recorder
        self.evaluator = evaluator
        self.performance = performance
        self.trade = trade
        self.clock = clock
        self._stop_event: asyncio.Event | None = None

    async def observe(self) -> Observation:
        """Fetch the book and derive this tick's observation."""
        settings = self.context.settings
        book = await self.books.get_book(settings.market)
        volume = calculate_visible_volume(book)
        sentiment = calculate_market_sentiment(volume)
        signal = calculate_trade_signal(
            sentiment, settings.sentiment_threshold, settings.hold_band
        )
        return Observation(
            instance_id=self.context.instance_id,
            timestamp=int(self.clock() * 1000),
            mid_price=volume.mid_price,
            trade_signal=signal,
            bid_volume=volume.bid_volume,
            ask_volume=volume.ask_volume,
            number_of_bids=volume.number_of_bids,
            number_of_asks=volume.number_of_asks,
            market_sentiment=sentiment.market_sentiment,
            bid_volume_percentage=sentiment.bid_volume_percentage,
            sentiment_threshold=settings.sentiment_threshold,
            order_book_depth=settings.order_book_depth,
        )

    async def run_once(self) -> CycleResult:
        """Execute one full tick.

        The observation write is the only step whose failure propagates;
        a missed write cannot be recovered later.
        """
        log = self.context.log
        instance_id = self.context.instance_id

        observation = await self.observe()
        await self.recorder.record(instance_id, observation)

        evaluation: EvaluationResult | None = None
        try:
            evaluation, summary = await self.evaluator.analyze(instance_id)
            await self.performance.record_performance(
                instance_id, evaluation, self.context.config.entries
            )
        except InvalidObservation as e:
            log.warning(f"Evaluation skipped: {e}")
        except StoreUnavailable as e:
            log.warning(f"Evaluation skipped, store unavailable: {e}")
        else:
            log.info(
                f"Analysis: signal={observation.trade_signal.value} "
                f"mid={observation.mid_price} sentiment={observation.market_sentiment} "
                f"guess_ratio={evaluation.guess_ratio:.4f} checks={evaluation.checks} "
                f"moving_avg={summary.moving_average:.2f} volatility={summary.volatility:.2f} "
                f"samples={summary.samples}"
            )

        await self.trade(observation.trade_signal, observation.mid_price)
        return CycleResult(observation=observation, evaluation=evaluation)

    async def run_forever(self) -> None:
        """Run ticks at a fixed interval until stop() or cancellation."""
        loop = asyncio.get_running_loop()
        interval = self.context.settings.trade_cycle_interval
        log = self.context.log
        self._stop_event = asyncio.Event()
        next_tick = loop.time()

        log.info(f"Starting trading cycle every {interval}s")
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except StoreUnavailable as e:
                log.warning(f"Tick aborted: {e}")
            except (httpx.HTTPError, ValueError) as e:
                log.warning(f"Cycle failed, no observation this tick: {e}")
            except Exception:
                log.exception("Unexpected error in trading cycle")

            next_tick += interval
            now = loop.time()
            if next_tick < now:
                # Overran one or more ticks; realign to the interval grid
                missed = int((now - next_tick) // interval) + 1
                next_tick += missed * interval
                log.warning(f"Cycle overran, skipping {missed} tick(s)")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_tick - now)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
