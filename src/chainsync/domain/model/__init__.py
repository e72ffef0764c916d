"""Public domain model surface."""

from __future__ import annotations

from chainsync.domain.model.entity import Entity, new_id, utcnow
from chainsync.domain.model.enums import (
    EmployeeRole,
    EmployeeStatus,
    EntityType,
    Gender,
    LedgerAction,
    SyncDirection,
    SyncStatus,
)
from chainsync.domain.model.erp import (
    Branch,
    Category,
    Customer,
    Employee,
    InventoryLine,
    PriceLine,
    Product,
)
from chainsync.domain.model.sync_log import SyncLog

__all__ = [
    "Branch",
    "Category",
    "Customer",
    "Employee",
    "EmployeeRole",
    "EmployeeStatus",
    "Entity",
    "EntityType",
    "Gender",
    "InventoryLine",
    "LedgerAction",
    "PriceLine",
    "Product",
    "SyncDirection",
    "SyncLog",
    "SyncStatus",
    "new_id",
    "utcnow",
]
