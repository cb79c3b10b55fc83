"""Lifecycle of a synchronisation generation: start, complete or fail."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sakesync.domain.model import Generation

if TYPE_CHECKING:
    from collections.abc import Callable

    from sakesync.domain.model import GenerationCounts
    from sakesync.domain.ports.unit_of_work import SyncUnitOfWork

log = getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def error_details(error: BaseException) -> dict[str, object]:
    """Serializable description of ``error`` for generation rows and reports."""

    return {
        "type": type(error).__name__,
        "stack": "".join(traceback.format_exception(error)),
    }


@dataclass(slots=True)
class GenerationLifecycle:
    """Create, complete or fail generations. Dry runs never touch the store."""

    unit_of_work_factory: Callable[[], SyncUnitOfWork]
    dry_run: bool = False
    clock: Callable[[], datetime] = field(default=utcnow)

    def start(self) -> Generation:
        started_at = self.clock()
        if self.dry_run:
            log.info("Dry run: generation is not persisted")
            return Generation(generation_id=None, started_at=started_at)

        with self.unit_of_work_factory() as uow:
            generation = uow.repositories.generations.create(started_at=started_at)
            uow.commit()
        log.info("Started generation #%s", generation.generation_id)
        return generation

    def complete(
        self,
        generation: Generation,
        counts: GenerationCounts,
        *,
        uow: SyncUnitOfWork | None = None,
    ) -> Generation:
        """Mark ``generation`` completed.

        When ``uow`` is given the update is staged in it and the caller commits,
        so the completion lands in the same transaction as the applied changes.
        """

        completed_at = self.clock()
        if generation.generation_id is None:
            generation.complete(counts, at=completed_at)
            return generation

        if uow is not None:
            stored = uow.repositories.generations.complete(
                generation.generation_id, counts, completed_at=completed_at
            )
        else:
            with self.unit_of_work_factory() as own_uow:
                stored = own_uow.repositories.generations.complete(
                    generation.generation_id, counts, completed_at=completed_at
                )
                own_uow.commit()
        log.info(
            "Completed generation #%s: inserted=%s, updated=%s, deleted=%s, unchanged=%s",
            stored.generation_id,
            counts.inserted,
            counts.updated,
            counts.deleted,
            counts.unchanged,
        )
        return stored

    def fail(self, generation: Generation, error: BaseException) -> Generation:
        completed_at = self.clock()
        message = str(error) or type(error).__name__
        details = error_details(error)
        if generation.generation_id is None:
            generation.fail(message, at=completed_at, details=details)
            return generation

        with self.unit_of_work_factory() as uow:
            stored = uow.repositories.generations.fail(
                generation.generation_id,
                message,
                completed_at=completed_at,
                details=details,
            )
            uow.commit()
        log.error("Generation #%s failed: %s", stored.generation_id, message)
        return stored
