"""Single-entity endpoints for customers, employees, categories and products."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from chainsync.api.routes.dependencies import branch_pusher, unit_of_work_factory
from chainsync.app import UnitOfWorkFactory
from chainsync.domain.model import EntityType
from chainsync.domain.ports import BranchPusher
from chainsync.domain.reconciliation import deactivate_entity, get_entity, update_entity

router = APIRouter()


class AddressableType(StrEnum):
    CUSTOMERS = EntityType.CUSTOMERS.value
    EMPLOYEES = EntityType.EMPLOYEES.value
    CATEGORIES = EntityType.CATEGORIES.value
    PRODUCTS = EntityType.PRODUCTS.value


@router.get("/{entity_type}/{identifier}")
def read_entity(
    entity_type: AddressableType,
    identifier: str,
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
) -> dict[str, Any]:
    entity = get_entity(entity_type.value, identifier, unit_of_work_factory=factory)
    return {"success": True, "data": entity}


@router.put("/{entity_type}/{identifier}")
def replace_fields(
    entity_type: AddressableType,
    identifier: str,
    body: Annotated[Any, Body()],
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
    pusher: Annotated[BranchPusher, Depends(branch_pusher)],
) -> dict[str, Any]:
    """Partial update: fields left out of the body keep their stored values."""

    change = update_entity(
        entity_type.value, identifier, body, unit_of_work_factory=factory, pusher=pusher
    )
    return {"success": True, "data": change.to_dict()}


@router.delete("/{entity_type}/{identifier}")
def deactivate(
    entity_type: AddressableType,
    identifier: str,
    factory: Annotated[UnitOfWorkFactory, Depends(unit_of_work_factory)],
) -> dict[str, Any]:
    change = deactivate_entity(entity_type.value, identifier, unit_of_work_factory=factory)
    return {"success": True, "data": change.to_dict()}
