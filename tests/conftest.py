from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sakesync.adapters.sqlalchemy import create_all_tables
from sakesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SAKENOWA_CACHE_ENABLED", "false")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sakenowa_payloads() -> dict[str, dict[str, object]]:
    return {
        "brands": {
            "brands": [
                {"id": 1, "name": "獺祭", "breweryId": 10},
                {"id": 2, "name": "久保田", "breweryId": 11},
                {"id": 3, "name": "幻の酒", "breweryId": 99},
                {"id": 4, "name": "香りなし", "breweryId": 10},
            ]
        },
        "breweries": {
            "breweries": [
                {"id": 10, "name": "旭酒造", "areaId": 35},
                {"id": 11, "name": "朝日酒造", "areaId": 15},
            ]
        },
        "flavor-charts": {
            "flavorCharts": [
                {"brandId": 1, "f1": 0.3, "f2": 0.6, "f3": 0.2, "f4": 0.4, "f5": 0.3, "f6": 0.5},
                {"brandId": 2, "f1": 0.2, "f2": 0.3, "f3": 0.4, "f4": 0.5, "f5": 0.6, "f6": 0.4},
                {"brandId": 3, "f1": 0.1, "f2": 0.1, "f3": 0.1, "f4": 0.1, "f5": 0.1, "f6": 0.1},
            ]
        },
    }


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True, create_tables=False)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
