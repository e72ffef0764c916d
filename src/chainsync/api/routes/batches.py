"""Batch import endpoints: one POST per entity type."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from chainsync.api.routes.dependencies import branch_pusher, unit_of_work_factory
from chainsync.app import UnitOfWorkFactory, records_from_payload
from chainsync.domain.model import EntityType, SyncDirection
from chainsync.domain.ports import BranchPusher
from chainsync.domain.reconciliation import run_batch

router = APIRouter()


@router.post("/{entity_type}")
def import_batch(
    entity_type: EntityType,
    body: Annotated[Any, Body()],
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
    pusher: Annotated[BranchPusher, Depends(branch_pusher)],
    total: Annotated[int | None, Query(ge=0)] = None,
    direction: SyncDirection = SyncDirection.IMPORT,
) -> JSONResponse:
    """Reconcile a batch and report one ledger entry per record."""

    outcome = run_batch(
        entity_type,
        records_from_payload(body),
        unit_of_work_factory=factory,
        direction=direction,
        pusher=pusher,
        declared_total=total,
    )
    if not outcome.success:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "All records failed validation",
                "code": "validation_error",
                "data": outcome.to_dict(),
            },
        )
    return JSONResponse(content={"success": True, "data": outcome.to_dict()})
