"""Tests for worker config loading and discovery."""

import textwrap
from pathlib import Path

import pytest

from bot.config import (
    CONFIG_FILE_ENV,
    discover_config_files,
    load_worker_config,
    resolve_config_path,
)
from core.errors import ConfigError


VALID_ENV = textwrap.dedent("""\
    APIKEY=my-key
    APISECRET=my-secret
    SENTIMENT_THRESHOLD=55
    ORDER_BOOK_DEPTH=100
    MINIMUM_DIFFERENCE_FOR_ANALYSIS=0.005
    MAX_DIFFERENCE_FOR_HOLD=0.01
    HOURS_TO_KEEP_REDIS_DATA=24
    TRADE_CYCLE_INTERVAL=300
""")


def write_env(directory: Path, name: str = ".env", content: str = VALID_ENV) -> Path:
    path = directory / name
    path.write_text(content)
    return path


class TestLoadWorkerConfig:
    def test_loads_typed_settings(self, tmp_path):
        config = load_worker_config(write_env(tmp_path, ".env.fast"))

        settings = config.settings
        assert settings.sentiment_threshold == 55.0
        assert settings.order_book_depth == 100
        assert settings.minimum_difference_for_analysis == 0.005
        assert settings.max_difference_for_hold == 0.01
        assert settings.hours_to_keep_redis_data == 24
        assert settings.trade_cycle_interval == 300.0
        assert settings.market == "BTC-EUR"
        assert settings.observation_ttl_seconds == 24 * 3600
        assert config.file_name == ".env.fast"

    def test_raw_entries_kept(self, tmp_path):
        config = load_worker_config(write_env(tmp_path))
        assert config.entries["APIKEY"] == "my-key"
        assert config.entries["SENTIMENT_THRESHOLD"] == "55"

    def test_fingerprint_excludes_credentials(self, tmp_path):
        a = load_worker_config(write_env(tmp_path, ".env.a"))
        b = load_worker_config(
            write_env(tmp_path, ".env.b", VALID_ENV.replace("my-key", "12345"))
        )
        assert a.fingerprint == b.fingerprint

    def test_process_environment_is_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SENTIMENT_THRESHOLD", "99")
        config = load_worker_config(write_env(tmp_path))
        assert config.settings.sentiment_threshold == 55.0

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_worker_config(tmp_path / ".env")

    def test_missing_required_key_raises(self, tmp_path):
        content = VALID_ENV.replace("HOURS_TO_KEEP_REDIS_DATA=24\n", "")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_worker_config(write_env(tmp_path, content=content))

    def test_non_numeric_value_raises(self, tmp_path):
        content = VALID_ENV.replace("SENTIMENT_THRESHOLD=55", "SENTIMENT_THRESHOLD=high")
        with pytest.raises(ConfigError):
            load_worker_config(write_env(tmp_path, content=content))

    def test_zero_interval_raises(self, tmp_path):
        content = VALID_ENV.replace("TRADE_CYCLE_INTERVAL=300", "TRADE_CYCLE_INTERVAL=0")
        with pytest.raises(ConfigError):
            load_worker_config(write_env(tmp_path, content=content))


class TestResolveConfigPath:
    def test_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_FILE_ENV, raising=False)
        assert resolve_config_path(tmp_path) == tmp_path / ".env"

    def test_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_FILE_ENV, ".env.slow")
        assert resolve_config_path(tmp_path) == tmp_path / ".env.slow"


class TestDiscoverConfigFiles:
    def test_finds_env_files_sorted(self, tmp_path):
        for name in [".env.b", ".env", ".env.a", "README.md", "env.txt"]:
            (tmp_path / name).write_text("")
        (tmp_path / ".env.dir").mkdir()

        names = [p.name for p in discover_config_files(tmp_path)]
        assert names == [".env", ".env.a", ".env.b"]

    def test_empty_directory(self, tmp_path):
        assert discover_config_files(tmp_path) == []
