"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, func, select

from chainsync.adapters.sqlalchemy.mappings import TABLE_BY_CLASS, branch_table, sync_log_table
from chainsync.domain.model import (
    Branch,
    Category,
    Customer,
    Employee,
    InventoryLine,
    PriceLine,
    Product,
    SyncLog,
    SyncStatus,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import CursorResult
    from sqlalchemy.orm import Session

    from chainsync.domain.model import EntityType, SyncDirection


class SqlAlchemyRepository[TEntity]:
    """Shared helpers for repositories keyed by the internal UUID."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = TABLE_BY_CLASS[entity_cls]

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyReconcilableRepository[TEntity](SqlAlchemyRepository[TEntity]):
    """Equality lookups over alternate identifier columns."""

    def find_by(
        self, columns: tuple[str, ...], values: tuple[object, ...], *, limit: int = 2
    ) -> Sequence[TEntity]:
        if len(columns) != len(values):
            raise ValueError("columns and values must have the same length")
        stmt = select(self._entity_cls)
        for column, value in zip(columns, values, strict=True):
            stmt = stmt.where(self._table.c[column] == value)
        stmt = stmt.order_by(self._table.c.created_at).limit(limit)
        return tuple(self.session.execute(stmt).scalars().all())


class SqlAlchemyCustomerRepository(SqlAlchemyReconcilableRepository[Customer]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Customer)


class SqlAlchemyEmployeeRepository(SqlAlchemyReconcilableRepository[Employee]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Employee)


class SqlAlchemyCategoryRepository(SqlAlchemyReconcilableRepository[Category]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Category)


class SqlAlchemyProductRepository(SqlAlchemyReconcilableRepository[Product]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Product)


class SqlAlchemyInventoryRepository(SqlAlchemyReconcilableRepository[InventoryLine]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, InventoryLine)


class SqlAlchemyPriceRepository(SqlAlchemyReconcilableRepository[PriceLine]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, PriceLine)


class SqlAlchemyBranchRepository(SqlAlchemyRepository[Branch]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Branch)

    def get_by_code(self, code: str) -> Branch | None:
        stmt = select(Branch).where(branch_table.c.code == code)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(self) -> Sequence[Branch]:
        stmt = select(Branch).where(branch_table.c.is_active.is_(True)).order_by(branch_table.c.code)
        return tuple(self.session.execute(stmt).scalars().all())

    def list_all(self) -> Sequence[Branch]:
        stmt = select(Branch).order_by(branch_table.c.code)
        return tuple(self.session.execute(stmt).scalars().all())


class SqlAlchemySyncLogRepository(SqlAlchemyRepository[SyncLog]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, SyncLog)

    def search(
        self,
        *,
        entity_type: EntityType | None = None,
        direction: SyncDirection | None = None,
        status: SyncStatus | None = None,
        started_from: datetime | None = None,
        started_to: datetime | None = None,
        limit: int = 100,
    ) -> Sequence[SyncLog]:
        columns = sync_log_table.c
        stmt = select(SyncLog)
        if entity_type is not None:
            stmt = stmt.where(columns.entity_type == entity_type)
        if direction is not None:
            stmt = stmt.where(columns.direction == direction)
        if status is not None:
            stmt = stmt.where(columns.status == status)
        if started_from is not None:
            stmt = stmt.where(columns.started_at >= started_from)
        if started_to is not None:
            stmt = stmt.where(columns.started_at <= started_to)
        stmt = stmt.order_by(columns.started_at.desc()).limit(limit)
        return tuple(self.session.execute(stmt).scalars().all())

    def count(
        self,
        *,
        status: SyncStatus,
        started_from: datetime | None = None,
        started_to: datetime | None = None,
    ) -> int:
        columns = sync_log_table.c
        stmt = select(func.count()).select_from(sync_log_table).where(columns.status == status)
        if started_from is not None:
            stmt = stmt.where(columns.started_at >= started_from)
        if started_to is not None:
            stmt = stmt.where(columns.started_at <= started_to)
        return int(self.session.execute(stmt).scalar_one())

    def group_counts(
        self, *, started_from: datetime
    ) -> Sequence[tuple[EntityType, SyncDirection, SyncStatus, int, int, int]]:
        columns = sync_log_table.c
        stmt = (
            select(
                columns.entity_type,
                columns.direction,
                columns.status,
                func.count(),
                func.coalesce(func.sum(columns.records_processed), 0),
                func.coalesce(func.sum(columns.records_failed), 0),
            )
            .where(columns.started_at >= started_from)
            .group_by(columns.entity_type, columns.direction, columns.status)
            .order_by(columns.entity_type, columns.direction, columns.status)
        )
        return [
            (row[0], row[1], row[2], int(row[3]), int(row[4]), int(row[5]))
            for row in self.session.execute(stmt).all()
        ]

    def delete_finished_before(self, cutoff: datetime) -> int:
        columns = sync_log_table.c
        finished = columns.status.in_((SyncStatus.COMPLETED, SyncStatus.FAILED))
        stmt = delete(sync_log_table).where(columns.started_at < cutoff).where(finished)
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount
