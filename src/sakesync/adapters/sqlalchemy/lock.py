"""Advisory run lock stored as a row of the ``sync_lock`` table."""

from __future__ import annotations

import os
import socket
import uuid
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from sakesync.adapters.sqlalchemy.mappings import sync_lock_table
from sakesync.adapters.sqlalchemy.unit_of_work import StartupError, configured_engine
from sakesync.domain.errors import SyncAlreadyRunningError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)

DEFAULT_LOCK_NAME = "catalog-sync"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _default_owner() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"


class SqlAlchemySyncLock:
    """Hold a named lock row for the duration of a ``with`` block.

    A lock older than ``stale_after_seconds`` is treated as abandoned and taken over.
    """

    def __init__(
        self,
        *,
        engine: Engine | None = None,
        name: str = DEFAULT_LOCK_NAME,
        stale_after_seconds: float = 6 * 60 * 60.0,
        owner: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = engine
        self.name = name
        self.stale_after = timedelta(seconds=stale_after_seconds)
        self.owner = owner or _default_owner()
        self.clock = clock
        self._held = False

    @property
    def engine(self) -> Engine:
        engine = self._engine or configured_engine()
        if engine is None:
            raise StartupError("SQLAlchemy adapter not initialised")
        return engine

    def __enter__(self) -> SqlAlchemySyncLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.release()
        return False

    def acquire(self) -> None:
        now = self.clock()
        try:
            with self.engine.begin() as connection:
                self._take_over_if_stale(connection, now)
                connection.execute(
                    insert(sync_lock_table).values(
                        name=self.name, owner=self.owner, acquired_at=now
                    )
                )
        except IntegrityError as exc:
            raise SyncAlreadyRunningError(
                f"Another synchronisation run holds the lock {self.name!r}"
            ) from exc
        self._held = True
        log.debug(f"Acquired sync lock {self.name!r} as {self.owner}")

    def release(self) -> None:
        if not self._held:
            return
        with self.engine.begin() as connection:
            connection.execute(
                delete(sync_lock_table)
                .where(sync_lock_table.c.name == self.name)
                .where(sync_lock_table.c.owner == self.owner)
            )
        self._held = False
        log.debug(f"Released sync lock {self.name!r}")

    def _take_over_if_stale(self, connection: Connection, now: datetime) -> None:
        row = (
            connection.execute(select(sync_lock_table).where(sync_lock_table.c.name == self.name))
            .mappings()
            .one_or_none()
        )
        if row is None:
            return
        acquired_at: datetime = row["acquired_at"]
        if now - acquired_at < self.stale_after:
            raise SyncAlreadyRunningError(
                f"Synchronisation already running since {acquired_at.isoformat()} "
                f"(owner {row['owner']})"
            )
        log.warning(
            f"Taking over stale sync lock {self.name!r} held by {row['owner']} "
            f"since {acquired_at.isoformat()}"
        )
        connection.execute(delete(sync_lock_table).where(sync_lock_table.c.name == self.name))


if TYPE_CHECKING:
    from sakesync.domain.ports.locking import SyncLock

    _lock_check: SyncLock = SqlAlchemySyncLock()
