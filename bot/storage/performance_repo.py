"""Performance record files.

One JSON object per (config file, instance) pair:
- {log_dir}/performance/performance-{config_file_name}-{instance_id}.json

Records are overwritten in place. Writes go to a temp file in the same
directory and are moved over the target with os.replace, so a concurrent
reader sees either the old record or the new one, never a partial file.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

import orjson
from pydantic import ValidationError

from core.errors import RecordParseError
from core.models import PerformanceRecord

logger = logging.getLogger(__name__)

PERFORMANCE_DIR_NAME = "performance"


def performance_path(log_dir: Path, config_file_name: str, instance_id: str) -> Path:
    return log_dir / PERFORMANCE_DIR_NAME / f"performance-{config_file_name}-{instance_id}.json"


def read_record(path: Path) -> PerformanceRecord:
    """Load and validate one record file.

    Raises:
        RecordParseError: unreadable, not JSON, or not a valid record
    """
    try:
        data = orjson.loads(path.read_bytes())
        return PerformanceRecord.model_validate(data)
    except (OSError, orjson.JSONDecodeError, ValidationError) as e:
        raise RecordParseError(f"{path}: {e}") from e


def write_atomic(path: Path, payload: bytes) -> None:
    """Write ``payload`` to ``path`` via temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class PerformanceRepository:
    """Async access to performance record files under ``log_dir``."""

    def __init__(self, log_dir: Path):
        self.log_dir = log_dir

    def path_for(self, config_file_name: str, instance_id: str) -> Path:
        return performance_path(self.log_dir, config_file_name, instance_id)

    async def load(self, config_file_name: str, instance_id: str) -> PerformanceRecord | None:
        """Existing record, or None if absent or unreadable."""
        path = self.path_for(config_file_name, instance_id)
        if not path.exists():
            return None
        try:
            return await asyncio.to_thread(read_record, path)
        except RecordParseError as e:
            logger.warning(f"Ignoring unreadable performance record: {e}")
            return None

    async def save(self, record: PerformanceRecord) -> Path:
        """Atomically overwrite the record's file."""
        path = self.path_for(record.config_file_name, record.instance_id)
        payload = orjson.dumps(record.to_json_dict(), option=orjson.OPT_INDENT_2)
        await asyncio.to_thread(write_atomic, path, payload)
        return path
