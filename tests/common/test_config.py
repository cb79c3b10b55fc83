from __future__ import annotations

from pathlib import Path

import pytest

from sakesync.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_flag,
    env_float,
    get_database_config,
    get_sakenowa_config,
    get_storage_config,
    get_sync_config,
    require_env_var,
)
from sakesync.config.sakenowa import SAKENOWA_BASE_URL


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError, match="EXAMPLE_VAR") as excinfo:
        require_env_var("EXAMPLE_VAR")

    assert excinfo.value.names == ["EXAMPLE_VAR"]


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("DRY_RUN", raw)

    assert env_flag("DRY_RUN") is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DRY_RUN", "maybe")

    with pytest.raises(ConfigurationError, match="DRY_RUN"):
        env_flag("DRY_RUN")


def test_env_float_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAKENOWA_TIMEOUT_SECONDS", "0")

    with pytest.raises(ConfigurationError):
        env_float("SAKENOWA_TIMEOUT_SECONDS", default=30.0, minimum=0.1)


def test_env_float_rejects_non_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAKENOWA_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError):
        env_float("SAKENOWA_TIMEOUT_SECONDS", default=30.0)


def test_storage_paths_follow_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SAKESYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()

    assert storage.database_path() == (tmp_path / "data" / "sakesync.db").resolve()
    assert storage.report_dir() == (tmp_path / "data" / "logs").resolve()
    assert get_database_config().uri == f"sqlite+pysqlite:///{storage.database_path()}"


def test_database_uri_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://sake@db/catalog")

    assert get_database_config().uri == "postgresql+psycopg://sake@db/catalog"


def test_sync_config_arguments_override_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DRY_RUN", "true")
    monkeypatch.setenv("SAKESYNC_REPORT_DIR", str(tmp_path / "env-reports"))
    monkeypatch.setenv("SAKESYNC_LOCK_STALE_SECONDS", "120")

    from_env = get_sync_config()
    explicit = get_sync_config(dry_run=False, report_dir=tmp_path / "cli-reports")

    assert from_env.dry_run is True
    assert from_env.report_dir == tmp_path / "env-reports"
    assert from_env.lock_stale_after_seconds == 120.0
    assert explicit.dry_run is False
    assert explicit.report_dir == tmp_path / "cli-reports"


def test_sakenowa_config_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SAKESYNC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SAKENOWA_CACHE_ENABLED", "true")
    for name in ("SAKENOWA_BASE_URL", "SAKENOWA_TIMEOUT_SECONDS", "SAKENOWA_CACHE_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    config = get_sakenowa_config()

    resilience = config.resilience
    assert config.base_url == SAKENOWA_BASE_URL + "/"
    assert resilience.timeout_seconds == 30.0
    assert resilience.ratelimit is not None
    assert resilience.cache is not None
    assert resilience.cache.default_ttl_seconds == 3600.0
    assert resilience.cache.sqlite_path == str(tmp_path.resolve() / "http_cache.db")


def test_sakenowa_cache_can_be_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAKENOWA_CACHE_ENABLED", "false")
    monkeypatch.setenv("SAKENOWA_BASE_URL", "https://mirror.example/api")
    monkeypatch.setenv("SAKENOWA_TIMEOUT_SECONDS", "5")

    config = get_sakenowa_config()

    assert config.resilience.cache is None
    assert config.base_url == "https://mirror.example/api/"
    assert config.resilience.timeout_seconds == 5.0


def test_report_dir_expands_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SAKESYNC_REPORT_DIR", raising=False)

    config = get_sync_config(report_dir=Path("~/sake-reports"))

    assert "~" not in str(config.report_dir)
