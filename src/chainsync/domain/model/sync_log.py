"""Provenance entry tracking one batch run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chainsync.domain.model.entity import Entity
from chainsync.domain.model.enums import SyncStatus

if TYPE_CHECKING:
    from datetime import datetime

    from chainsync.domain.model.enums import EntityType, SyncDirection


@dataclass(eq=False, kw_only=True)
class SyncLog(Entity):
    entity_type: EntityType
    direction: SyncDirection
    records_total: int
    started_at: datetime
    status: SyncStatus = SyncStatus.IN_PROGRESS
    records_processed: int = 0
    records_failed: int = 0
    error_message: str | None = None
    completed_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.status is not SyncStatus.IN_PROGRESS

    def finish(
        self,
        *,
        status: SyncStatus,
        processed: int,
        failed: int,
        error: str | None,
        now: datetime,
    ) -> None:
        self.status = status
        self.records_processed = processed
        self.records_failed = failed
        self.error_message = error
        self.completed_at = now
        self.touch(now)
