"""Synchronization run settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import env_flag, env_float, optional_env_var
from .storage import StorageConfig, get_storage_config

DEFAULT_LOCK_STALE_SECONDS = 6 * 60 * 60.0


@dataclass(frozen=True, slots=True)
class SyncConfig:
    dry_run: bool
    report_dir: Path
    lock_stale_after_seconds: float = DEFAULT_LOCK_STALE_SECONDS


def get_sync_config(
    *,
    dry_run: bool | None = None,
    report_dir: Path | None = None,
    storage: StorageConfig | None = None,
) -> SyncConfig:
    """Build the run settings; explicit arguments override the environment."""

    if report_dir is None:
        env_dir = optional_env_var("SAKESYNC_REPORT_DIR")
        report_dir = Path(env_dir) if env_dir else (storage or get_storage_config()).report_dir()

    return SyncConfig(
        dry_run=env_flag("DRY_RUN") if dry_run is None else dry_run,
        report_dir=report_dir.expanduser(),
        lock_stale_after_seconds=env_float(
            "SAKESYNC_LOCK_STALE_SECONDS", default=DEFAULT_LOCK_STALE_SECONDS, minimum=0.0
        ),
    )
