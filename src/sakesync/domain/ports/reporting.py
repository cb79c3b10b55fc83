"""Port for persisting run reports for operators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from sakesync.domain.reporting import ErrorReport, RunReport


@runtime_checkable
class RunReporter(Protocol):
    def write_report(self, report: RunReport) -> Path: ...

    def write_error_report(self, report: ErrorReport) -> Path: ...
