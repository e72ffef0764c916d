from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from chainsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from chainsync.domain.model import Customer
from chainsync.domain.reconciliation import PersistenceConflictError

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
        SqlAlchemyReconciliationUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_repositories_need_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyReconciliationUnitOfWork()

    with pytest.raises(StartupError, match="session not initialised"):
        _ = uow.repositories


@pytest.mark.integration
def test_record_scope_rolls_back_only_the_failing_record(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        customers = uow.repositories.customers
        with uow.record_scope():
            customers.add(Customer(name="Alice", customer_code="C1"))
        with pytest.raises(PersistenceConflictError, match="uniqueness violation"):
            with uow.record_scope():
                customers.add(Customer(name="Impostor", customer_code="C1"))
        with uow.record_scope():
            customers.add(Customer(name="Bob", customer_code="C2"))
        uow.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        customers = uow.repositories.customers
        assert [item.name for item in customers.find_by(("customer_code",), ("C1",))] == ["Alice"]
        assert customers.find_by(("customer_code",), ("C2",))


@pytest.mark.integration
def test_exit_without_commit_discards_changes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.customers.add(Customer(name="Ghost", onec_id="E0"))

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.customers.find_by(("onec_id",), ("E0",)) == ()
