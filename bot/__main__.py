"""Worker entry point.

Binds this process to one config file ($CONFIG_FILE_NAME, default .env),
generates an instance id and runs the trading cycle until interrupted.
"""

import asyncio
import logging
import signal
import sys

from core.errors import ConfigError, StoreUnavailable
from bot.clients import BitvavoRestClient, CachedBookSource
from bot.config import load_worker_config, resolve_config_path
from bot.context import LOG_FORMAT, WorkerContext, create_context
from bot.services import GuessRatioEvaluator, PerformanceRecorder, TradingCycle
from bot.storage import ObservationRecorder, PerformanceRepository, create_store

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


async def run_worker(context: WorkerContext) -> None:
    settings = context.settings
    store = create_store(settings.redis_url)
    client = BitvavoRestClient()

    cycle = TradingCycle(
        context=context,
        books=CachedBookSource(
            client, store, depth=settings.order_book_depth, enabled=settings.cache_book_orders
        ),
        recorder=ObservationRecorder(store, settings.observation_ttl_seconds),
        evaluator=GuessRatioEvaluator(
            store,
            min_difference=settings.minimum_difference_for_analysis,
            max_difference_for_hold=settings.max_difference_for_hold,
        ),
        performance=PerformanceRecorder(
            PerformanceRepository(settings.log_dir), context.config.file_name
        ),
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, cycle.stop)

    try:
        await store.ping()
        await cycle.run_forever()
    finally:
        await client.close()
        await store.close()
        context.log.info("Worker stopped")


def main() -> int:
    configure_logging()
    try:
        config = load_worker_config(resolve_config_path())
    except ConfigError as e:
        logger.error(str(e))
        return 2

    context = create_context(config)
    context.log.info(f"Worker started (instance {context.instance_id})")
    try:
        asyncio.run(run_worker(context))
    except StoreUnavailable as e:
        context.log.error(f"Store unreachable at startup: {e}")
        return 1
    finally:
        context.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
