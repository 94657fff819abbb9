from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect

from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from catalogsync.domain.errors import StoreWriteError, SyncAlreadyRunningError
from catalogsync.domain.model import SyncRun
from tests.helpers.catalog import T0, make_entry

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine


def test_migrations_create_catalog_tables(sqlite_engine: Engine) -> None:
    tables = set(inspect(sqlite_engine).get_table_names())

    assert {"category", "developer", "app", "app_bundle_id", "sync_run"} <= tables


def test_commit_persists_changes(seeded_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    entry = make_entry("com.a")
    with seeded_unit_of_work() as uow:
        uow.repositories.apps.add(entry)
        uow.commit()

    with seeded_unit_of_work() as uow:
        assert uow.repositories.apps.get(entry.id) is not None


def test_leaving_without_commit_discards_changes(
    seeded_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    entry = make_entry("com.a")
    with seeded_unit_of_work() as uow:
        uow.repositories.apps.add(entry)

    with seeded_unit_of_work() as uow:
        assert uow.repositories.apps.get(entry.id) is None


def test_exception_rolls_back(seeded_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    entry = make_entry("com.a")
    with pytest.raises(RuntimeError), seeded_unit_of_work() as uow:
        uow.repositories.apps.add(entry)
        uow.session.flush()
        raise RuntimeError("boom")

    with seeded_unit_of_work() as uow:
        assert uow.repositories.apps.baseline() == []


def test_second_running_row_is_refused(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.sync_runs.add(SyncRun(started_at=T0))
        uow.commit()

    with pytest.raises(SyncAlreadyRunningError), sqlite_unit_of_work() as uow:
        uow.repositories.sync_runs.add(SyncRun(started_at=T0))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.sync_runs.running()) == 1


def test_finished_runs_do_not_count_against_the_guard(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        for _ in range(2):
            run = SyncRun(started_at=T0)
            run.fail(run.stats, "boom", at=T0)
            uow.repositories.sync_runs.add(run)
        uow.repositories.sync_runs.add(SyncRun(started_at=T0))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.sync_runs.recent(10)) == 3


def test_shared_bundle_id_is_a_write_error(
    seeded_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with seeded_unit_of_work() as uow:
        uow.repositories.apps.add(make_entry("com.a"))
        uow.commit()

    with pytest.raises(StoreWriteError), seeded_unit_of_work() as uow:
        uow.repositories.apps.add(make_entry("com.b", "com.a"))
        uow.commit()


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    assert is_started() is False
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_twice_requires_force(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    try:
        assert configured_engine() is sqlite_engine
        with pytest.raises(StartupError, match="already initialised"):
            startup(engine=sqlite_engine)
    finally:
        shutdown()


def test_repositories_outside_context_raise(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories
