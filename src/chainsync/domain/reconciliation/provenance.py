"""Sync provenance: one log entry per batch, opened before and closed after.

Entries are written through their own short units of work so that a batch
rolled back as a whole still leaves its provenance behind. Callers hold the
returned :class:`SyncLogSnapshot` values; there is no shared handle.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from chainsync.domain.model import SyncLog, SyncStatus, utcnow

from .contracts import SyncLogSnapshot
from .errors import ProvenanceError

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from chainsync.domain.model import EntityType, SyncDirection
    from chainsync.domain.ports import ReconciliationUnitOfWork

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]
type Clock = Callable[[], datetime]


class SyncLogRecorder:
    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, *, clock: Clock = utcnow) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._clock = clock

    def begin(
        self, entity_type: EntityType, direction: SyncDirection, total: int
    ) -> SyncLogSnapshot:
        now = self._clock()
        sync_log = SyncLog(
            entity_type=entity_type,
            direction=direction,
            records_total=total,
            started_at=now,
        )
        sync_log.touch(now)
        try:
            with self._unit_of_work_factory() as uow:
                uow.repositories.sync_logs.add(sync_log)
                snapshot = SyncLogSnapshot.of(sync_log)
                uow.commit()
        except Exception as exc:
            raise ProvenanceError(f"could not open sync log for {entity_type}: {exc}") from exc
        log.debug("Opened sync log %s for %s (%s records)", snapshot.id, entity_type, total)
        return snapshot

    def complete(
        self,
        handle: SyncLogSnapshot,
        status: SyncStatus,
        processed: int,
        *,
        failed: int = 0,
        error: str | None = None,
    ) -> SyncLogSnapshot:
        if status is SyncStatus.IN_PROGRESS:
            raise ProvenanceError("a sync log can only be completed or failed")
        try:
            with self._unit_of_work_factory() as uow:
                sync_log = uow.repositories.sync_logs.get(handle.id)
                if sync_log is None:
                    raise ProvenanceError(f"sync log {handle.id} does not exist")
                if sync_log.is_finished:
                    raise ProvenanceError(
                        f"sync log {handle.id} was already closed as {sync_log.status}"
                    )
                sync_log.finish(
                    status=status,
                    processed=processed,
                    failed=failed,
                    error=error,
                    now=self._clock(),
                )
                snapshot = SyncLogSnapshot.of(sync_log)
                uow.commit()
        except ProvenanceError:
            raise
        except Exception as exc:
            raise ProvenanceError(f"could not close sync log {handle.id}: {exc}") from exc
        return snapshot


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncLogFilter:
    entity_type: EntityType | None = None
    direction: SyncDirection | None = None
    status: SyncStatus | None = None
    started_from: datetime | None = None
    started_to: datetime | None = None
    limit: int = 100


@dataclass(frozen=True, slots=True)
class SyncGroupSummary:
    entity_type: EntityType
    direction: SyncDirection
    status: SyncStatus
    runs: int
    records_processed: int
    records_failed: int

    def to_dict(self) -> dict[str, object]:
        return {
            "entity_type": str(self.entity_type),
            "direction": str(self.direction),
            "status": str(self.status),
            "runs": self.runs,
            "records_processed": self.records_processed,
            "records_failed": self.records_failed,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncSummary:
    days: int
    groups: tuple[SyncGroupSummary, ...] = field(default_factory=tuple)
    running: tuple[SyncLogSnapshot, ...] = field(default_factory=tuple)
    failed_last_24h: int = 0
    completed_last_24h: int = 0
    stale_in_progress: int = 0

    @property
    def system_status(self) -> str:
        if self.stale_in_progress > 0:
            return "warning"
        if self.failed_last_24h > self.completed_last_24h:
            return "error"
        return "healthy"

    def to_dict(self) -> dict[str, object]:
        return {
            "days": self.days,
            "system_status": self.system_status,
            "groups": [group.to_dict() for group in self.groups],
            "running": [snapshot.to_dict() for snapshot in self.running],
            "health": {
                "failed_last_24h": self.failed_last_24h,
                "completed_last_24h": self.completed_last_24h,
                "stale_in_progress": self.stale_in_progress,
            },
        }


def list_sync_logs(
    unit_of_work_factory: UnitOfWorkFactory, query: SyncLogFilter | None = None
) -> list[SyncLogSnapshot]:
    query = query or SyncLogFilter()
    with unit_of_work_factory() as uow:
        rows = uow.repositories.sync_logs.search(
            entity_type=query.entity_type,
            direction=query.direction,
            status=query.status,
            started_from=query.started_from,
            started_to=query.started_to,
            limit=query.limit,
        )
        return [SyncLogSnapshot.of(row) for row in rows]


def get_sync_log(unit_of_work_factory: UnitOfWorkFactory, sync_id: UUID) -> SyncLogSnapshot | None:
    with unit_of_work_factory() as uow:
        row = uow.repositories.sync_logs.get(sync_id)
        return SyncLogSnapshot.of(row) if row is not None else None


def summarize_sync_logs(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    days: int,
    stale_after: timedelta,
    now: datetime | None = None,
) -> SyncSummary:
    moment = now or utcnow()
    day_ago = moment - timedelta(hours=24)
    with unit_of_work_factory() as uow:
        repository = uow.repositories.sync_logs
        groups = tuple(
            SyncGroupSummary(*row)
            for row in repository.group_counts(started_from=moment - timedelta(days=days))
        )
        running = tuple(
            SyncLogSnapshot.of(row)
            for row in repository.search(status=SyncStatus.IN_PROGRESS, limit=50)
        )
        return SyncSummary(
            days=days,
            groups=groups,
            running=running,
            failed_last_24h=repository.count(status=SyncStatus.FAILED, started_from=day_ago),
            completed_last_24h=repository.count(
                status=SyncStatus.COMPLETED, started_from=day_ago
            ),
            stale_in_progress=repository.count(
                status=SyncStatus.IN_PROGRESS, started_to=moment - stale_after
            ),
        )


def cleanup_sync_logs(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    older_than_days: int,
    now: datetime | None = None,
) -> int:
    """Delete finished entries that started before the retention window."""

    if older_than_days < 1:
        raise ValueError("older_than_days must be at least 1")
    cutoff = (now or utcnow()) - timedelta(days=older_than_days)
    with unit_of_work_factory() as uow:
        deleted = uow.repositories.sync_logs.delete_finished_before(cutoff)
        uow.commit()
    log.info("Deleted %s sync logs started before %s", deleted, cutoff.isoformat())
    return deleted
