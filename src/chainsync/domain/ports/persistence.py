"""Ports for persisting reconcilable entities and sync logs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from chainsync.domain.model import (
    Branch,
    Category,
    Customer,
    Employee,
    InventoryLine,
    PriceLine,
    Product,
    SyncLog,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from chainsync.domain.model import EntityType, SyncDirection, SyncStatus


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class ReconcilableRepository[TEntity](Repository[TEntity], Protocol):
    """Equality lookups over alternate identifier columns."""

    def find_by(
        self, columns: tuple[str, ...], values: tuple[object, ...], *, limit: int = 2
    ) -> Sequence[TEntity]:
        """Return up to ``limit`` rows whose ``columns`` equal ``values``."""
        ...


@runtime_checkable
class CustomerRepository(ReconcilableRepository[Customer], Protocol):
    """Repository contract for customers."""


@runtime_checkable
class EmployeeRepository(ReconcilableRepository[Employee], Protocol):
    """Repository contract for employees."""


@runtime_checkable
class CategoryRepository(ReconcilableRepository[Category], Protocol):
    """Repository contract for product categories."""


@runtime_checkable
class ProductRepository(ReconcilableRepository[Product], Protocol):
    """Repository contract for products."""


@runtime_checkable
class InventoryRepository(ReconcilableRepository[InventoryLine], Protocol):
    """Repository contract for branch stock levels."""


@runtime_checkable
class PriceRepository(ReconcilableRepository[PriceLine], Protocol):
    """Repository contract for branch prices."""


@runtime_checkable
class BranchRepository(Repository[Branch], Protocol):
    """Repository contract for branch endpoints."""

    def get_by_code(self, code: str) -> Branch | None: ...

    def list_active(self) -> Sequence[Branch]: ...

    def list_all(self) -> Sequence[Branch]: ...


@runtime_checkable
class SyncLogRepository(Repository[SyncLog], Protocol):
    """Persistence contract for sync provenance entries."""

    def search(
        self,
        *,
        entity_type: EntityType | None = None,
        direction: SyncDirection | None = None,
        status: SyncStatus | None = None,
        started_from: datetime | None = None,
        started_to: datetime | None = None,
        limit: int = 100,
    ) -> Sequence[SyncLog]: ...

    def count(
        self,
        *,
        status: SyncStatus,
        started_from: datetime | None = None,
        started_to: datetime | None = None,
    ) -> int: ...

    def group_counts(
        self, *, started_from: datetime
    ) -> Sequence[tuple[EntityType, SyncDirection, SyncStatus, int, int, int]]:
        """Return ``(type, direction, status, runs, processed, failed)`` rows."""
        ...

    def delete_finished_before(self, cutoff: datetime) -> int: ...
