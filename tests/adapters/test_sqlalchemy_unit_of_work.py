from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from sakesync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    is_started,
    missing_tables,
    shutdown,
    startup,
)
from tests.helpers.catalog import FIXED_NOW, make_candidate, make_master

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine


def test_commit_persists_across_units(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        generation = uow.repositories.generations.create(started_at=FIXED_NOW)
        uow.repositories.masters.insert(make_master(make_candidate(1)))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.generations.get(generation.generation_id or 0) is not None
        assert [record.brand_id for record in uow.repositories.masters.list_active()] == [1]


def test_uncommitted_work_is_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.masters.insert(make_master(make_candidate(1)))

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.masters.list_active() == []


def test_exception_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.masters.insert(make_master(make_candidate(1)))
        raise RuntimeError("abort")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.masters.get(1) is None


def test_repositories_require_an_open_unit(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_twice_requires_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, create_tables=False)
    try:
        with pytest.raises(StartupError):
            startup(engine=sqlite_engine)
    finally:
        shutdown()


def test_missing_tables_lists_absent_store_tables(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, create_tables=False)
    try:
        assert missing_tables() == []
    finally:
        shutdown()

    empty = create_engine("sqlite+pysqlite:///:memory:")
    startup(engine=empty, create_tables=False)
    try:
        assert sorted(missing_tables()) == [
            "generation_changes_summary",
            "sake_master",
            "sake_master_history",
            "sync_generations",
            "sync_lock",
        ]
    finally:
        shutdown()
