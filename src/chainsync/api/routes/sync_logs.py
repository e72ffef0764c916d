"""Sync log monitoring endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from chainsync.api.routes.dependencies import sync_config, unit_of_work_factory
from chainsync.app import UnitOfWorkFactory
from chainsync.config import SyncConfig
from chainsync.domain.model import EntityType, SyncDirection, SyncStatus
from chainsync.domain.reconciliation import (
    EntityNotFoundError,
    SyncLogFilter,
    cleanup_sync_logs,
    get_sync_log,
    list_sync_logs,
    summarize_sync_logs,
)

router = APIRouter()


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@router.get("")
def search_sync_logs(
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
    entity_type: EntityType | None = None,
    direction: SyncDirection | None = None,
    status: SyncStatus | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> dict[str, Any]:
    query = SyncLogFilter(
        entity_type=entity_type,
        direction=direction,
        status=status,
        started_from=_as_utc(start),
        started_to=_as_utc(end),
        limit=limit,
    )
    logs = list_sync_logs(factory, query)
    return {"success": True, "data": [snapshot.to_dict() for snapshot in logs]}


@router.get("/summary")
def summary(
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
    config: Annotated[SyncConfig, Depends(sync_config)],
    days: Annotated[int | None, Query(ge=1)] = None,
) -> dict[str, Any]:
    result = summarize_sync_logs(
        factory,
        days=days or config.summary_days,
        stale_after=timedelta(hours=config.stale_after_hours),
    )
    return {"success": True, "data": result.to_dict()}


@router.get("/{sync_id}")
def read_sync_log(
    sync_id: UUID,
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
) -> dict[str, Any]:
    snapshot = get_sync_log(factory, sync_id)
    if snapshot is None:
        raise EntityNotFoundError(f"sync log {sync_id} not found")
    return {"success": True, "data": snapshot.to_dict()}


@router.delete("")
def delete_old_sync_logs(
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
    config: Annotated[SyncConfig, Depends(sync_config)],
    older_than_days: Annotated[int | None, Query(ge=1)] = None,
) -> dict[str, Any]:
    days = older_than_days or config.retention_days
    deleted = cleanup_sync_logs(factory, older_than_days=days)
    return {"success": True, "data": {"deleted": deleted, "older_than_days": days}}
