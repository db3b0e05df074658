"""Per-worker context.

Built once per worker process with a freshly generated instance id. Holds
the worker's config and its logger; passed explicitly to every component
instead of living in module globals.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from bot.config import WorkerConfig, WorkerSettings

LOGS_DIR_NAME = "logs"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Package loggers whose records land in the per-instance log file
INSTANCE_LOGGERS = ("bot", "core")


class InstanceLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the worker's config file and instance id."""

    def process(self, msg, kwargs):
        return f"[{self.extra['config_file']}:{self.extra['instance_id']}] {msg}", kwargs


def generate_instance_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True)
class WorkerContext:
    instance_id: str
    config: WorkerConfig
    log: logging.LoggerAdapter
    log_handler: logging.Handler

    @property
    def settings(self) -> WorkerSettings:
        return self.config.settings

    def close(self) -> None:
        """Detach and close the per-instance log file."""
        for name in INSTANCE_LOGGERS:
            logging.getLogger(name).removeHandler(self.log_handler)
        self.log_handler.close()


def create_context(config: WorkerConfig, instance_id: str | None = None) -> WorkerContext:
    """Build the context and attach the per-instance log file.

    The log file is ``{log_dir}/logs/app-{instance_id}.log``. It receives
    every record from the ``bot`` and ``core`` packages, not just the
    context's own logger.
    """
    instance_id = instance_id or generate_instance_id()
    logs_dir = config.settings.log_dir / LOGS_DIR_NAME
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(logs_dir / f"app-{instance_id}.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    for name in INSTANCE_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.INFO)

    adapter = InstanceLogAdapter(
        logging.getLogger(f"bot.worker.{instance_id}"),
        {"instance_id": instance_id, "config_file": config.file_name},
    )
    return WorkerContext(
        instance_id=instance_id, config=config, log=adapter, log_handler=handler
    )
