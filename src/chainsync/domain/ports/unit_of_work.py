"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import TracebackType

    from chainsync.domain.ports.persistence import (
        BranchRepository,
        CategoryRepository,
        CustomerRepository,
        EmployeeRepository,
        InventoryRepository,
        PriceRepository,
        ProductRepository,
        SyncLogRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def record_scope(self) -> AbstractContextManager[None]:
        """Nested scope for one record.

        Writes made inside the scope are kept when it exits cleanly and are
        rolled back (without touching earlier scopes) when it raises.
        """
        ...


@dataclass(slots=True)
class ReconciliationRepositories(RepositoryCollection):
    """Repositories touched while reconciling ERP batches."""

    customers: CustomerRepository
    employees: EmployeeRepository
    categories: CategoryRepository
    products: ProductRepository
    inventory: InventoryRepository
    prices: PriceRepository
    branches: BranchRepository
    sync_logs: SyncLogRepository


type ReconciliationUnitOfWork = UnitOfWork[ReconciliationRepositories]
