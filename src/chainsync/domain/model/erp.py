"""Entities mirrored from the ERP and the branches they are pushed to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from chainsync.domain.model.entity import Entity
from chainsync.domain.model.enums import EmployeeRole, EmployeeStatus, EntityType, Gender

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Branch(Entity):
    """A store running its own server that receives pushed changes."""

    code: str
    name: str
    api_endpoint: str | None = None
    api_key: str | None = None
    is_active: bool = True

    @property
    def is_reachable(self) -> bool:
        return self.is_active and bool(self.api_endpoint)


@dataclass(eq=False, kw_only=True)
class Customer(Entity):
    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.CUSTOMERS

    name: str
    onec_id: str | None = None
    customer_code: str | None = None
    loyalty_card_number: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    loyalty_points: int = 0
    discount_percentage: float = 0.0
    is_vip: bool = False
    is_active: bool = True
    notes: str | None = None
    extra_data: dict[str, Any] | None = None


@dataclass(eq=False, kw_only=True)
class Employee(Entity):
    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.EMPLOYEES

    onec_id: str
    employee_code: str
    branch_id: UUID
    name: str
    role: EmployeeRole
    phone: str | None = None
    email: str | None = None
    hire_date: date | None = None
    salary: float | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is EmployeeStatus.ACTIVE


@dataclass(eq=False, kw_only=True)
class Category(Entity):
    """Product grouping keyed by the ERP category key; categories may nest."""

    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.CATEGORIES

    key: str
    name: str
    onec_id: str | None = None
    description: str | None = None
    parent_id: UUID | None = None
    sort_order: int = 0
    is_active: bool = True


@dataclass(eq=False, kw_only=True)
class Product(Entity):
    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.PRODUCTS

    onec_id: str
    sku: str
    name: str
    base_price: float
    cost: float
    barcode: str | None = None
    description: str | None = None
    category_id: UUID | None = None
    brand: str | None = None
    unit_of_measure: str = "pcs"
    tax_rate: float = 0.0
    image_url: str | None = None
    is_active: bool = True


@dataclass(eq=False, kw_only=True)
class InventoryLine(Entity):
    """Stock level of one product at one branch."""

    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.INVENTORY

    branch_id: UUID
    product_id: UUID
    quantity_in_stock: float
    min_stock_level: float | None = None
    max_stock_level: float | None = None


@dataclass(eq=False, kw_only=True)
class PriceLine(Entity):
    """Branch-specific selling price of one product."""

    ENTITY_TYPE: ClassVar[EntityType | None] = EntityType.PRICES

    branch_id: UUID
    product_id: UUID
    price: float
    cost: float | None = None
    effective_from: datetime | None = None
    is_available: bool = True
