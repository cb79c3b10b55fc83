from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sakesync.adapters.reports import JsonRunReporter, report_timestamp
from sakesync.domain.changes import ChangeSet
from sakesync.domain.model import Generation
from sakesync.domain.reporting import ErrorReport, RunReport, SyncStats
from tests.helpers.catalog import make_candidate

if TYPE_CHECKING:
    from pathlib import Path

STARTED = datetime(2025, 3, 1, 9, 30, 5, 123456, tzinfo=UTC)


def test_report_timestamp_has_millisecond_resolution() -> None:
    assert report_timestamp(STARTED) == "2025-03-01T09-30-05-123Z"


def test_run_report_file(tmp_path: Path) -> None:
    reporter = JsonRunReporter(tmp_path / "logs")
    report = RunReport.build(
        generation=Generation(generation_id=3, started_at=STARTED),
        change_set=ChangeSet(inserts=[make_candidate(1)]),
        stats=SyncStats(started_at=STARTED, processed=1, inserted=1),
        finished_at=STARTED,
        dry_run=False,
    )

    path = reporter.write_report(report)

    assert path.name == "sync-report-2025-03-01T09-30-05-123Z.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["generation_id"] == "3"
    assert document["changes_summary"]["inserts"] == 1


def test_error_report_file_keeps_unicode(tmp_path: Path) -> None:
    reporter = JsonRunReporter(tmp_path)
    report = ErrorReport.from_exception(
        ValueError("獺祭 could not be written"),
        stats=SyncStats(started_at=STARTED),
        timestamp=STARTED,
    )

    path = reporter.write_error_report(report)

    assert path.name == "error-report-2025-03-01T09-30-05-123Z.json"
    text = path.read_text(encoding="utf-8")
    assert "獺祭 could not be written" in text
    assert json.loads(text)["error"]["type"] == "ValueError"
