"""SQLAlchemy mapping metadata for the chainsync domain model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from chainsync.domain.model import (
    Branch,
    Category,
    Customer,
    Employee,
    EmployeeRole,
    EmployeeStatus,
    EntityType,
    Gender,
    InventoryLine,
    PriceLine,
    Product,
    SyncDirection,
    SyncLog,
    SyncStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _money() -> Numeric[float]:
    return Numeric(12, 2, asdecimal=False)


def _enum(enum_cls: type[Any], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _audit_columns() -> tuple[Column[Any], ...]:
    return (
        Column("id", UUIDColumnType, primary_key=True),
        Column("created_at", UTCDateTime(), nullable=True),
        Column("updated_at", UTCDateTime(), nullable=True),
    )


branch_table = Table(
    "branches",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("code", String(64), nullable=False),
    Column("name", String(255), nullable=False),
    Column("api_endpoint", String(512), nullable=True),
    Column("api_key", String(255), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    UniqueConstraint("code"),
)

customer_table = Table(
    "customers",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("onec_id", String(255), nullable=True),
    Column("customer_code", String(64), nullable=True),
    Column("loyalty_card_number", String(64), nullable=True),
    Column("phone", String(32), nullable=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=True),
    Column("address", Text, nullable=True),
    Column("date_of_birth", Date, nullable=True),
    Column("gender", _enum(Gender, "gender"), nullable=True),
    Column("loyalty_points", Integer, nullable=False, default=0),
    Column("discount_percentage", Float, nullable=False, default=0.0),
    Column("is_vip", Boolean, nullable=False, default=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("notes", Text, nullable=True),
    Column("extra_data", JSON, nullable=True),
    UniqueConstraint("onec_id"),
    UniqueConstraint("customer_code"),
    UniqueConstraint("loyalty_card_number"),
    Index(None, "phone"),
)

employee_table = Table(
    "employees",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("onec_id", String(255), nullable=False),
    Column("employee_code", String(64), nullable=False),
    Column("branch_id", UUIDColumnType, ForeignKey("branches.id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("role", _enum(EmployeeRole, "employee_role"), nullable=False),
    Column("phone", String(32), nullable=True),
    Column("email", String(255), nullable=True),
    Column("hire_date", Date, nullable=True),
    Column("salary", _money(), nullable=True),
    Column("status", _enum(EmployeeStatus, "employee_status"), nullable=False),
    UniqueConstraint("onec_id"),
    UniqueConstraint("employee_code", "branch_id"),
)

category_table = Table(
    "categories",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("key", String(100), nullable=False),
    Column("name", String(255), nullable=False),
    Column("onec_id", String(255), nullable=True),
    Column("description", Text, nullable=True),
    Column("parent_id", UUIDColumnType, ForeignKey("categories.id"), nullable=True),
    Column("sort_order", Integer, nullable=False, default=0),
    Column("is_active", Boolean, nullable=False, default=True),
    UniqueConstraint("key"),
    UniqueConstraint("onec_id"),
)

product_table = Table(
    "products",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("onec_id", String(255), nullable=False),
    Column("sku", String(100), nullable=False),
    Column("barcode", String(100), nullable=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("category_id", UUIDColumnType, ForeignKey("categories.id"), nullable=True),
    Column("brand", String(100), nullable=True),
    Column("unit_of_measure", String(20), nullable=False, default="pcs"),
    Column("base_price", _money(), nullable=False),
    Column("cost", _money(), nullable=False),
    Column("tax_rate", Float, nullable=False, default=0.0),
    Column("image_url", String(512), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    UniqueConstraint("onec_id"),
    UniqueConstraint("sku"),
    UniqueConstraint("barcode"),
)

inventory_table = Table(
    "branch_inventory",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("branch_id", UUIDColumnType, ForeignKey("branches.id"), nullable=False),
    Column("product_id", UUIDColumnType, ForeignKey("products.id"), nullable=False),
    Column("quantity_in_stock", Float, nullable=False),
    Column("min_stock_level", Float, nullable=True),
    Column("max_stock_level", Float, nullable=True),
    UniqueConstraint("branch_id", "product_id"),
)

price_table = Table(
    "branch_product_pricing",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("branch_id", UUIDColumnType, ForeignKey("branches.id"), nullable=False),
    Column("product_id", UUIDColumnType, ForeignKey("products.id"), nullable=False),
    Column("price", _money(), nullable=False),
    Column("cost", _money(), nullable=True),
    Column("effective_from", UTCDateTime(), nullable=True),
    Column("is_available", Boolean, nullable=False, default=True),
    UniqueConstraint("branch_id", "product_id"),
)

sync_log_table = Table(
    "sync_logs",
    mapper_registry.metadata,
    *_audit_columns(),
    Column("entity_type", _enum(EntityType, "entity_type"), nullable=False),
    Column("direction", _enum(SyncDirection, "sync_direction"), nullable=False),
    Column("status", _enum(SyncStatus, "sync_status"), nullable=False),
    Column("records_total", Integer, nullable=False),
    Column("records_processed", Integer, nullable=False, default=0),
    Column("records_failed", Integer, nullable=False, default=0),
    Column("error_message", Text, nullable=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("completed_at", UTCDateTime(), nullable=True),
    Index(None, "started_at"),
    Index(None, "status"),
)

TABLE_BY_CLASS: Final[dict[type[Any], Table]] = {
    Branch: branch_table,
    Customer: customer_table,
    Employee: employee_table,
    Category: category_table,
    Product: product_table,
    InventoryLine: inventory_table,
    PriceLine: price_table,
    SyncLog: sync_log_table,
}


@cache
def start_mappers() -> None:
    """Map the domain dataclasses onto their tables (idempotent)."""

    for entity_cls, table in TABLE_BY_CLASS.items():
        mapper_registry.map_imperatively(entity_cls, table)
    configure_mappers()


def create_all_tables(engine: Engine) -> None:
    mapper_registry.metadata.create_all(engine)
