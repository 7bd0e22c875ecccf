from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from flatport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from flatport.domain.model import Description

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()

    with pytest.raises(StartupError):
        SqlAlchemyImportUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True, migrate=False)

    with pytest.raises(StartupError):
        startup(engine=engine_b, migrate=False)

    startup(engine=engine_b, force=True, migrate=False)
    assert configured_engine() is engine_b


def test_repositories_require_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, migrate=False)
    uow = SqlAlchemyImportUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_and_rollback_discards(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, migrate=False)
    kept = Description(identifier="kept")
    dropped = Description(identifier="dropped")

    with SqlAlchemyImportUnitOfWork() as uow:
        uow.repositories.descriptions.save(kept)
        uow.commit()
        uow.repositories.descriptions.save(dropped)
        uow.rollback()

    with SqlAlchemyImportUnitOfWork() as uow:
        descriptions = uow.repositories.descriptions
        assert descriptions.get(kept.id) is not None
        assert descriptions.get(dropped.id) is None


def test_exception_rolls_back_uncommitted_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, migrate=False)
    description = Description(identifier="lost")

    with pytest.raises(RuntimeError), SqlAlchemyImportUnitOfWork() as uow:
        uow.repositories.descriptions.save(description)
        raise RuntimeError("boom")

    with SqlAlchemyImportUnitOfWork() as uow:
        assert uow.repositories.descriptions.get(description.id) is None


def test_repositories_share_the_unit_of_work_indexer(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True, migrate=False)
    uow = SqlAlchemyImportUnitOfWork()

    with uow:
        assert uow.repositories.indexer is uow.indexer
