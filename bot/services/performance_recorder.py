"""Configuration-performance recorder.

Pairs a worker's redacted configuration with its latest evaluation and
persists it as a single record per (config file, instance). The record is
a running snapshot: startDate is kept from the first write, everything
else is replaced.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from core.fingerprint import fingerprint, redact
from core.models import EvaluationResult, PerformanceRecord
from bot.storage.performance_repo import PerformanceRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PerformanceRecorder:
    """Writes performance records for one worker process."""

    def __init__(
        self,
        repo: PerformanceRepository,
        config_file_name: str,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repo = repo
        self.config_file_name = config_file_name
        self.clock = clock

    async def record_performance(
        self,
        instance_id: str,
        result: EvaluationResult,
        config_snapshot: Mapping[str, str | None],
    ) -> Path:
        """Overwrite this worker's record with ``result``.

        Credential-like keys are removed from both the fingerprint input
        and the stored configuration.

        Returns:
            Path of the record file
        """
        now = self.clock()
        previous = await self.repo.load(self.config_file_name, instance_id)

        record = PerformanceRecord(
            fingerprint=fingerprint(config_snapshot),
            guess_ratio=result.guess_ratio,
            checks=result.checks,
            start_date=previous.start_date if previous else now,
            end_date=now,
            configuration=redact(config_snapshot),
            instance_id=instance_id,
            config_file_name=self.config_file_name,
        )
        path = await self.repo.save(record)
        logger.debug(
            f"Performance {path.name}: ratio={record.guess_ratio:.4f} checks={record.checks}"
        )
        return path
