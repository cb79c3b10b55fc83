"""JSON report files written after each synchronisation run."""

from __future__ import annotations

import json
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from sakesync.domain.reporting import ErrorReport, RunReport

log = getLogger(__name__)

RUN_REPORT_PREFIX = "sync-report"
ERROR_REPORT_PREFIX = "error-report"


def report_timestamp(value: datetime) -> str:
    """Filesystem-safe UTC timestamp with millisecond resolution."""

    moment = value.astimezone(UTC)
    return f"{moment:%Y-%m-%dT%H-%M-%S}-{moment.microsecond // 1000:03d}Z"


class JsonRunReporter:
    def __init__(self, log_dir: Path) -> None:
        self.log_dir = log_dir

    def write_report(self, report: RunReport) -> Path:
        path = self._write(RUN_REPORT_PREFIX, report.started_at, report.to_dict())
        log.info(f"Sync report written to {path}")
        return path

    def write_error_report(self, report: ErrorReport) -> Path:
        return self._write(ERROR_REPORT_PREFIX, report.started_at, report.to_dict())

    def _write(self, prefix: str, started_at: datetime, payload: dict[str, object]) -> Path:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.log_dir / f"{prefix}-{report_timestamp(started_at)}.json"
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return path


if TYPE_CHECKING:
    from sakesync.domain.ports.reporting import RunReporter

    _reporter_check: RunReporter = JsonRunReporter(Path())
