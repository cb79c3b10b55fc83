"""Run one synchronisation of the external catalog into the master store."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sakesync.domain.apply import ChangeApplier
from sakesync.domain.changes import ChangeSet, detect_changes
from sakesync.domain.errors import MasterStoreNotFoundError
from sakesync.domain.generations import GenerationLifecycle, utcnow
from sakesync.domain.model import GenerationCounts, GenerationStatus
from sakesync.domain.reporting import ErrorReport, RunReport, SyncStats
from sakesync.domain.summary import build_change_summary, format_change_preview

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from sakesync.domain.model import ChangeSummary, Generation, MasterRecord
    from sakesync.domain.ports.fetching import CatalogFetcher
    from sakesync.domain.ports.locking import SyncLock
    from sakesync.domain.ports.reporting import RunReporter
    from sakesync.domain.ports.unit_of_work import SyncUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class SyncResult:
    """Outcome of a synchronisation run."""

    generation: Generation
    change_set: ChangeSet
    stats: SyncStats
    dry_run: bool
    summary: ChangeSummary | None = None
    report_path: Path | None = None


def synchronize_catalog(
    *,
    fetcher: CatalogFetcher,
    unit_of_work_factory: Callable[[], SyncUnitOfWork],
    reporter: RunReporter,
    lock: SyncLock | None = None,
    dry_run: bool = False,
    clock: Callable[[], datetime] = utcnow,
) -> SyncResult:
    """Fetch the catalog, detect changes and apply them as a new generation.

    All master, history and summary writes of a run share one transaction with
    the generation's completion. On failure, including an interrupt, that
    transaction is rolled back, the generation is marked failed, a run report and
    an error report are written and the exception is re-raised. Dry runs compute
    and log the change set without writing to the store and without taking
    ``lock``.
    """

    stats = SyncStats(started_at=clock())
    lifecycle = GenerationLifecycle(unit_of_work_factory, dry_run=dry_run, clock=clock)
    generation: Generation | None = None
    change_set: ChangeSet | None = None

    with ExitStack() as stack:
        try:
            if lock is not None and not dry_run:
                stack.enter_context(lock)

            generation = lifecycle.start()
            candidates = fetcher()
            stats.processed = len(candidates)
            log.info("Fetched %s candidate records", stats.processed)

            current = _load_active_masters(unit_of_work_factory)
            log.info("Active master records: %s", len(current))

            change_set = detect_changes(candidates, current)
            stats.unchanged = change_set.unchanged

            summary: ChangeSummary | None = None
            if dry_run:
                for line in format_change_preview(change_set):
                    log.info(line)
                generation = lifecycle.complete(generation, _counts(change_set, stats))
            else:
                generation, summary = _apply_and_complete(
                    generation,
                    change_set,
                    stats=stats,
                    lifecycle=lifecycle,
                    unit_of_work_factory=unit_of_work_factory,
                    clock=clock,
                )

            report = RunReport.build(
                generation=generation,
                change_set=change_set,
                stats=stats,
                finished_at=clock(),
                dry_run=dry_run,
            )
            report_path = reporter.write_report(report)
        except BaseException as exc:
            stats.errors.append(str(exc) or type(exc).__name__)
            _handle_failure(
                exc,
                generation,
                change_set,
                stats=stats,
                lifecycle=lifecycle,
                reporter=reporter,
                dry_run=dry_run,
            )
            raise

    log.info("Generation %s finished in %sms", generation.label, report.duration_ms)
    return SyncResult(
        generation=generation,
        change_set=change_set,
        stats=stats,
        dry_run=dry_run,
        summary=summary,
        report_path=report_path,
    )


def _load_active_masters(
    unit_of_work_factory: Callable[[], SyncUnitOfWork],
) -> list[MasterRecord]:
    with unit_of_work_factory() as uow:
        try:
            return uow.repositories.masters.list_active()
        except MasterStoreNotFoundError:
            log.warning("Master table not found; treating the master set as empty")
            return []


def _counts(change_set: ChangeSet, stats: SyncStats) -> GenerationCounts:
    return GenerationCounts(
        inserted=len(change_set.inserts),
        updated=len(change_set.updates),
        deleted=len(change_set.deletes),
        unchanged=change_set.unchanged,
        total_records=stats.processed,
    )


def _apply_and_complete(
    generation: Generation,
    change_set: ChangeSet,
    *,
    stats: SyncStats,
    lifecycle: GenerationLifecycle,
    unit_of_work_factory: Callable[[], SyncUnitOfWork],
    clock: Callable[[], datetime],
) -> tuple[Generation, ChangeSummary | None]:
    if generation.generation_id is None:
        raise ValueError("Cannot apply changes without a persisted generation")

    summary: ChangeSummary | None = None
    with unit_of_work_factory() as uow:
        if change_set.has_changes:
            applier = ChangeApplier(uow.repositories, generation_id=generation.generation_id)
            try:
                applier.apply(change_set, now=clock())
            finally:
                stats.inserted = applier.result.inserted
                stats.updated = applier.result.updated
                stats.deleted = applier.result.deleted
            summary = build_change_summary(change_set, generation_id=generation.generation_id)
            uow.repositories.summaries.add(summary)
            log.info(
                "Change impact of generation #%s: %s",
                generation.generation_id,
                summary.change_impact,
            )
        else:
            log.info("No changes detected")

        completed = lifecycle.complete(generation, _counts(change_set, stats), uow=uow)
        uow.commit()
    return completed, summary


def _handle_failure(
    error: BaseException,
    generation: Generation | None,
    change_set: ChangeSet | None,
    *,
    stats: SyncStats,
    lifecycle: GenerationLifecycle,
    reporter: RunReporter,
    dry_run: bool,
) -> None:
    log.error("Synchronisation failed: %s", str(error) or type(error).__name__)
    if (
        generation is not None
        and not generation.is_dry_run
        and generation.status is GenerationStatus.RUNNING
    ):
        try:
            generation = lifecycle.fail(generation, error)
        except Exception:
            log.exception("Could not mark generation #%s as failed", generation.generation_id)

    finished_at = lifecycle.clock()
    run_report = RunReport.build(
        generation=generation,
        change_set=change_set or ChangeSet(),
        stats=stats,
        finished_at=finished_at,
        dry_run=dry_run,
        failed=True,
    )
    try:
        reporter.write_report(run_report)
    except OSError:
        log.exception("Could not write run report")

    error_report = ErrorReport.from_exception(
        error, stats=stats, timestamp=finished_at, generation=generation
    )
    try:
        path = reporter.write_error_report(error_report)
    except OSError:
        log.exception("Could not write error report")
    else:
        log.info("Error report written to %s", path)
