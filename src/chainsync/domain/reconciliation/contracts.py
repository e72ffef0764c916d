"""Value objects exchanged between the reconciliation stages.

Everything here is immutable once built: ledger entries, delivery plans and
sync log snapshots are handed from stage to stage and back to the caller
without being mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from chainsync.domain.model import LedgerAction, SyncStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from uuid import UUID

    from chainsync.domain.model import Entity, EntityType, SyncDirection, SyncLog


def is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


@dataclass(frozen=True, slots=True)
class IdentifierField:
    """One alternate identifier; composite keys span several columns."""

    name: str
    columns: tuple[str, ...]
    unique: bool = True

    def value_from(self, candidates: Mapping[str, object]) -> tuple[object, ...] | None:
        """Return the lookup key, or ``None`` unless every column has a value."""

        values = tuple(candidates.get(column) for column in self.columns)
        if any(is_blank(value) for value in values):
            return None
        return values


@dataclass(frozen=True, slots=True)
class IdentifierSet:
    """Alternate identifiers of one entity type in fixed precedence order."""

    label: str
    fields: tuple[IdentifierField, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.fields)

    def single_column_fields(self) -> tuple[IdentifierField, ...]:
        return tuple(item for item in self.fields if len(item.columns) == 1)


@dataclass(frozen=True, slots=True)
class BranchTarget:
    """Snapshot of a branch endpoint, safe to use after the session closes."""

    code: str
    base_url: str
    api_key: str | None = None


@dataclass(frozen=True, slots=True)
class BranchRoute:
    """Where and how one entity type is pushed to a branch server."""

    sub_path: str
    envelope_key: str


@dataclass(frozen=True, slots=True)
class DeliveryPlan:
    route: BranchRoute
    payload: Mapping[str, Any]
    targets: tuple[BranchTarget, ...]


@dataclass(frozen=True, slots=True)
class DistributionReport:
    branch_code: str
    delivered: bool
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"branch_code": self.branch_code, "delivered": self.delivered}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True, slots=True)
class AppliedRecord:
    entity: Entity
    action: LedgerAction


@dataclass(frozen=True, slots=True, kw_only=True)
class LedgerEntry:
    """Outcome of one input record; ``success`` reflects the upsert only."""

    index: int
    identifiers: Mapping[str, object]
    success: bool
    action: LedgerAction | None = None
    entity_id: UUID | None = None
    error: str | None = None
    error_code: str | None = None
    distribution: tuple[DistributionReport, ...] = ()

    @property
    def distribution_failed(self) -> bool:
        return any(not report.delivered for report in self.distribution)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "index": self.index,
            "identifiers": dict(self.identifiers),
            "success": self.success,
        }
        if self.success:
            data["action"] = str(self.action)
            data["entity_id"] = str(self.entity_id) if self.entity_id else None
        else:
            data["error"] = self.error
            data["error_code"] = self.error_code
        if self.distribution:
            data["distribution"] = [report.to_dict() for report in self.distribution]
        return data


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncLogSnapshot:
    """Detached copy of a sync log row."""

    id: UUID
    entity_type: EntityType
    direction: SyncDirection
    status: SyncStatus
    records_total: int
    records_processed: int
    records_failed: int
    error_message: str | None
    started_at: datetime
    completed_at: datetime | None

    @classmethod
    def of(cls, sync_log: SyncLog) -> SyncLogSnapshot:
        return cls(
            id=sync_log.id,
            entity_type=sync_log.entity_type,
            direction=sync_log.direction,
            status=sync_log.status,
            records_total=sync_log.records_total,
            records_processed=sync_log.records_processed,
            records_failed=sync_log.records_failed,
            error_message=sync_log.error_message,
            started_at=sync_log.started_at,
            completed_at=sync_log.completed_at,
        )

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def completion_percentage(self) -> float:
        if self.records_total <= 0:
            return 100.0 if self.status is SyncStatus.COMPLETED else 0.0
        done = self.records_processed + self.records_failed
        return round(min(done, self.records_total) * 100.0 / self.records_total, 2)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "entity_type": str(self.entity_type),
            "direction": str(self.direction),
            "status": str(self.status),
            "records_total": self.records_total,
            "records_processed": self.records_processed,
            "records_failed": self.records_failed,
            "error_message": self.error_message,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "completion_percentage": self.completion_percentage,
        }


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    sync_log: SyncLogSnapshot
    ledger: tuple[LedgerEntry, ...] = field(default_factory=tuple)

    @property
    def imported(self) -> int:
        return sum(1 for entry in self.ledger if entry.success)

    @property
    def failed(self) -> int:
        return sum(1 for entry in self.ledger if not entry.success)

    @property
    def success(self) -> bool:
        """False only when the batch had records and every one of them failed."""

        return not self.ledger or self.imported > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "sync_id": str(self.sync_log.id),
            "results": [entry.to_dict() for entry in self.ledger],
            "imported": self.imported,
            "failed": self.failed,
        }
