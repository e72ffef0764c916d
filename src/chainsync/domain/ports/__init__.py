"""Domain ports implemented by adapters."""

from __future__ import annotations

from .distribution import BranchPusher
from .persistence import (
    BranchRepository,
    CategoryRepository,
    CustomerRepository,
    EmployeeRepository,
    InventoryRepository,
    PriceRepository,
    ProductRepository,
    ReconcilableRepository,
    Repository,
    SyncLogRepository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "BranchPusher",
    "BranchRepository",
    "CategoryRepository",
    "CustomerRepository",
    "EmployeeRepository",
    "InventoryRepository",
    "PriceRepository",
    "ProductRepository",
    "ReconcilableRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "SyncLogRepository",
    "UnitOfWork",
]
