"""Winner selector.

Scans every ``*performance*`` folder under the log directory, ranks all
performance records and archives the top K:
- {log_dir}/winners/winners-DD-MM-YYYY:HH:MM:SS.json -> JSON array

Ranking is guessRatio descending, then checks descending (more samples
win a tie), then file path for a stable order. Unreadable records are
skipped. Archives are created exclusively and never overwritten.

Usage:
    python -m sweep.winners
    python -m sweep.winners --log-dir log --top 10
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import orjson

from core.errors import RecordParseError
from core.models import PerformanceRecord
from bot.storage.performance_repo import read_record

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path("log")
DEFAULT_TOP_K = 5
PERFORMANCE_MARKER = "performance"
WINNERS_DIR_NAME = "winners"


@dataclass(slots=True, frozen=True)
class RankedRecord:
    path: Path
    record: PerformanceRecord

    @property
    def sort_key(self) -> tuple[float, int, str]:
        return (-self.record.guess_ratio, -self.record.checks, str(self.path))


def find_performance_folders(log_dir: Path) -> list[Path]:
    return sorted(
        p for p in log_dir.iterdir()
        if p.is_dir() and PERFORMANCE_MARKER in p.name
    )


def find_record_files(folder: Path) -> list[Path]:
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix == ".json")


def collect_records(log_dir: Path) -> list[RankedRecord]:
    """Parse every record file; log and skip the ones that fail."""
    records: list[RankedRecord] = []
    skipped = 0

    for folder in find_performance_folders(log_dir):
        for path in find_record_files(folder):
            try:
                records.append(RankedRecord(path=path, record=read_record(path)))
            except RecordParseError as e:
                skipped += 1
                logger.warning(f"Skipping malformed performance record {e}")

    logger.info(f"Collected {len(records)} performance records ({skipped} skipped)")
    return records


def rank(records: list[RankedRecord], top_k: int) -> list[RankedRecord]:
    return sorted(records, key=lambda r: r.sort_key)[:top_k]


def archive_name(now: datetime, suffix: int = 0) -> str:
    stamp = now.strftime("%d-%m-%Y:%H:%M:%S")
    extra = f"-{suffix}" if suffix else ""
    return f"winners-{stamp}{extra}.json"


def write_archive(winners_dir: Path, payload: bytes, now: datetime) -> Path:
    """Create a new archive file; add a numeric suffix on name collision."""
    winners_dir.mkdir(parents=True, exist_ok=True)
    suffix = 0
    while True:
        path = winners_dir / archive_name(now, suffix)
        try:
            with open(path, "xb") as f:
                f.write(payload)
            return path
        except FileExistsError:
            suffix += 1


def select_winners(
    log_dir: Path = DEFAULT_LOG_DIR,
    top_k: int = DEFAULT_TOP_K,
    now: datetime | None = None,
) -> Path:
    """Rank all performance records and archive the best ``top_k``.

    Returns:
        Path of the new winners archive

    Raises:
        OSError: log directory unreadable or archive not writable
    """
    now = now or datetime.now()
    winners = rank(collect_records(log_dir), top_k)
    payload = orjson.dumps(
        [w.record.to_json_dict() for w in winners],
        option=orjson.OPT_INDENT_2,
    )
    path = write_archive(log_dir / WINNERS_DIR_NAME, payload, now)
    logger.info(f"Analysis complete. {len(winners)} winners saved to {path}")
    return path


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Archive the best-performing worker configs")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=DEFAULT_LOG_DIR,
        help=f"Log directory to scan (default: {DEFAULT_LOG_DIR})",
    )
    parser.add_argument(
        "--top",
        type=positive_int,
        default=DEFAULT_TOP_K,
        help=f"Number of winners to keep (default: {DEFAULT_TOP_K})",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)
    try:
        select_winners(args.log_dir, args.top)
    except OSError as e:
        logger.error(f"Winner selection failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
