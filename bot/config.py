"""Worker configuration.

Each worker is bound to exactly one dotenv-style file (``.env``,
``.env.fast``, ...). The file is parsed once at startup into typed
settings; the raw entries are kept alongside for redaction and
fingerprinting.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from core.errors import ConfigError
from core.fingerprint import fingerprint

logger = logging.getLogger(__name__)

# Environment variable naming the config file a worker is bound to
CONFIG_FILE_ENV = "CONFIG_FILE_NAME"
DEFAULT_CONFIG_FILE = ".env"

# Config files are discovered by this filename prefix
CONFIG_FILE_PREFIX = ".env"


class WorkerSettings(BaseSettings):
    """Typed worker settings, read only from the worker's own config file."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Exchange credentials (never persisted)
    apikey: str = ""
    apisecret: str = ""

    # Market / signal
    market: str = "BTC-EUR"
    sentiment_threshold: float
    hold_band: float = 0.0
    order_book_depth: int = Field(gt=0)
    cache_book_orders: bool = False

    # Evaluation
    minimum_difference_for_analysis: float
    max_difference_for_hold: float
    hours_to_keep_redis_data: int = Field(gt=0)

    # Cycle
    trade_cycle_interval: float = Field(gt=0)

    # Infrastructure
    redis_url: str = "redis://localhost:6379/0"
    log_dir: Path = Path("log")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Process environment is shared by the whole fleet; ignore it.
        return (init_settings, dotenv_settings)

    @property
    def observation_ttl_seconds(self) -> int:
        """Store retention for observations."""
        return self.hours_to_keep_redis_data * 3600


@dataclass(slots=True)
class WorkerConfig:
    """A loaded config file: typed settings plus its raw entries."""

    path: Path
    settings: WorkerSettings
    entries: dict[str, str | None] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.entries)


def resolve_config_path(directory: Path | None = None) -> Path:
    """Config file this process is bound to (``$CONFIG_FILE_NAME`` or ``.env``)."""
    name = os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE
    path = Path(name)
    if not path.is_absolute():
        path = (directory or Path.cwd()) / path
    return path


def load_worker_config(path: Path) -> WorkerConfig:
    """Parse and validate one worker config file.

    Raises:
        ConfigError: file missing or settings invalid
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        settings = WorkerSettings(_env_file=path)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path.name}: {e}") from e

    entries = dict(dotenv_values(path))
    config = WorkerConfig(path=path, settings=settings, entries=entries)
    logger.info(
        "Loaded worker config %s: market=%s, interval=%ss, fingerprint=%s",
        config.file_name,
        settings.market,
        settings.trade_cycle_interval,
        config.fingerprint,
    )
    return config


def discover_config_files(directory: Path) -> list[Path]:
    """Config file candidates in ``directory``, sorted by name."""
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.name.startswith(CONFIG_FILE_PREFIX)
    )
