"""SQLAlchemy-backed unit of work for reconciliation batches."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from chainsync.adapters.sqlalchemy.mappings import start_mappers
from chainsync.adapters.sqlalchemy.migrations import upgrade_head
from chainsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyBranchRepository,
    SqlAlchemyCategoryRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyEmployeeRepository,
    SqlAlchemyInventoryRepository,
    SqlAlchemyPriceRepository,
    SqlAlchemyProductRepository,
    SqlAlchemySyncLogRepository,
)
from chainsync.config import get_database_uri
from chainsync.domain.ports.unit_of_work import ReconciliationRepositories, RepositoryCollection
from chainsync.domain.reconciliation.errors import PersistenceConflictError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call chainsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _disable_driver_transactions(dbapi_connection: Any, _connection_record: Any) -> None:
    dbapi_connection.isolation_level = None


def _emit_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite honour SAVEPOINT inside an explicit transaction.

    The driver's own transaction handling is switched off and ``BEGIN`` is
    emitted by SQLAlchemy instead. Engines for other dialects are untouched.
    """

    if engine.dialect.name != "sqlite" or event.contains(engine, "begin", _emit_begin):
        return
    event.listen(engine, "connect", _disable_driver_transactions)
    event.listen(engine, "begin", _emit_begin)


def build_engine(database_uri: str | None = None) -> Engine:
    engine = create_engine(database_uri or get_database_uri(), future=True)
    enable_sqlite_savepoints(engine)
    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, migrations, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or build_engine(database_uri)
    enable_sqlite_savepoints(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def ensure_started() -> None:
    if _STATE.engine is None:
        startup()


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def record_scope(self) -> Iterator[None]:
        """Run one record's writes inside a SAVEPOINT.

        The savepoint is flushed and released on success; on any error it is
        rolled back so earlier records in the same transaction stay intact.
        """

        try:
            with self.session.begin_nested():
                yield
                self.session.flush()
        except IntegrityError as exc:
            raise PersistenceConflictError(f"uniqueness violation: {exc.orig or exc}") from exc

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyReconciliationUnitOfWork(BaseSqlAlchemyUnitOfWork[ReconciliationRepositories]):
    """Unit of work spanning every repository a reconciliation batch touches."""

    def _build_repositories(self, session: Session) -> ReconciliationRepositories:
        return ReconciliationRepositories(
            customers=SqlAlchemyCustomerRepository(session),
            employees=SqlAlchemyEmployeeRepository(session),
            categories=SqlAlchemyCategoryRepository(session),
            products=SqlAlchemyProductRepository(session),
            inventory=SqlAlchemyInventoryRepository(session),
            prices=SqlAlchemyPriceRepository(session),
            branches=SqlAlchemyBranchRepository(session),
            sync_logs=SqlAlchemySyncLogRepository(session),
        )


if TYPE_CHECKING:
    from chainsync.domain.ports.unit_of_work import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
