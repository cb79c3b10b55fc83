"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sakesync.adapters.reports import JsonRunReporter
from sakesync.adapters.sakenowa import SakenowaFetcher
from sakesync.adapters.sqlalchemy import (
    SqlAlchemySyncLock,
    SqlAlchemyUnitOfWork,
    is_started,
    missing_tables,
    startup,
)
from sakesync.config.sync import get_sync_config
from sakesync.domain.errors import CatalogFetchError, MasterStoreNotFoundError
from sakesync.domain.sync import SyncResult, synchronize_catalog

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sakesync.domain.model import Generation
    from sakesync.domain.ports.fetching import CatalogFetcher
    from sakesync.domain.ports.locking import SyncLock
    from sakesync.domain.ports.reporting import RunReporter
    from sakesync.domain.ports.unit_of_work import SyncUnitOfWork

type UnitOfWorkFactory = Callable[[], SyncUnitOfWork]

log = getLogger(__name__)


def sync_sake_catalog(
    *,
    fetcher: CatalogFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    reporter: RunReporter | None = None,
    lock: SyncLock | None = None,
    dry_run: bool | None = None,
    report_dir: Path | None = None,
) -> SyncResult:
    """Synchronise the Sakenowa catalog into the master store using the configured adapters."""

    config = get_sync_config(dry_run=dry_run, report_dir=report_dir)
    if not is_started():
        startup(create_tables=not config.dry_run)

    effective_fetcher = fetcher or SakenowaFetcher()
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    effective_reporter = reporter or JsonRunReporter(config.report_dir)
    effective_lock = lock
    if effective_lock is None and not config.dry_run:
        effective_lock = SqlAlchemySyncLock(stale_after_seconds=config.lock_stale_after_seconds)

    log.info(f"Starting catalog sync: dry_run={config.dry_run}, reports={config.report_dir}")
    result = synchronize_catalog(
        fetcher=effective_fetcher,
        unit_of_work_factory=effective_uow,
        reporter=effective_reporter,
        lock=effective_lock,
        dry_run=config.dry_run,
    )
    log.info(
        f"Finished catalog sync: generation={result.generation.label}, "
        f"inserted={len(result.change_set.inserts)}, updated={len(result.change_set.updates)}, "
        f"deleted={len(result.change_set.deletes)}, unchanged={result.change_set.unchanged}"
    )
    return result


@dataclass(slots=True)
class PreflightReport:
    """Readiness of the store and the catalog source."""

    missing_tables: list[str] = field(default_factory=list[str])
    active_records: int | None = None
    latest_generation: Generation | None = None
    source_sizes: dict[str, int] | None = None
    source_error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.missing_tables and self.source_error is None


def check_environment(
    *,
    fetcher: SakenowaFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PreflightReport:
    """Inspect the store and probe the source without writing anything."""

    if not is_started():
        startup(create_tables=False)

    report = PreflightReport(missing_tables=missing_tables())
    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    with effective_uow() as uow:
        try:
            report.active_records = len(uow.repositories.masters.list_active())
        except MasterStoreNotFoundError:
            log.warning("Master table not found")
        if "sync_generations" not in report.missing_tables:
            report.latest_generation = uow.repositories.generations.latest()

    effective_fetcher = fetcher or SakenowaFetcher()
    try:
        report.source_sizes = effective_fetcher.fetch_collection_sizes()
    except CatalogFetchError as exc:
        report.source_error = str(exc)
        log.warning(f"Catalog source unreachable: {exc}")

    return report
