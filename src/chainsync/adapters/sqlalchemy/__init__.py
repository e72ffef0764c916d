"""SQLAlchemy adapter package for chainsync."""

from __future__ import annotations

from .mappings import TABLE_BY_CLASS, create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyBranchRepository,
    SqlAlchemyCategoryRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyEmployeeRepository,
    SqlAlchemyInventoryRepository,
    SqlAlchemyPriceRepository,
    SqlAlchemyProductRepository,
    SqlAlchemySyncLogRepository,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    build_engine,
    enable_sqlite_savepoints,
    ensure_started,
    shutdown,
    startup,
)

__all__ = [
    "TABLE_BY_CLASS",
    "SqlAlchemyBranchRepository",
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyEmployeeRepository",
    "SqlAlchemyInventoryRepository",
    "SqlAlchemyPriceRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemySyncLogRepository",
    "StartupError",
    "build_engine",
    "create_all_tables",
    "enable_sqlite_savepoints",
    "ensure_started",
    "mapper_registry",
    "shutdown",
    "startup",
]
