from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from flatport.adapters.search import LoggingSearchIndexer
from flatport.adapters.sqlalchemy import create_all_tables, start_mappers
from flatport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.csv_files import run_preset_import

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from flatport.domain.flatfile import RunStatus


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def indexer() -> LoggingSearchIndexer:
    return LoggingSearchIndexer()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    indexer: LoggingSearchIndexer,
) -> Iterator[Callable[[], SqlAlchemyImportUnitOfWork]]:
    startup(engine=sqlite_engine, force=True, migrate=False)

    def factory() -> SqlAlchemyImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork(indexer=indexer)

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def import_csv_bytes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyImportUnitOfWork],
) -> Callable[..., RunStatus]:
    """Run a preset import over in-memory CSV bytes against the SQLite store."""

    def run(data: bytes, preset: str = "description", **settings: object) -> RunStatus:
        return run_preset_import(data, sqlite_unit_of_work, preset=preset, **settings)

    return run
