"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Reconcilable record types, named after the ERP batch feeds."""

    CUSTOMERS = "customers"
    EMPLOYEES = "employees"
    CATEGORIES = "categories"
    PRODUCTS = "products"
    INVENTORY = "inventory"
    PRICES = "prices"


class SyncDirection(StrEnum):
    IMPORT = "import"
    EXPORT = "export"


class SyncStatus(StrEnum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class LedgerAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class EmployeeRole(StrEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    CASHIER = "cashier"


class EmployeeStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"
