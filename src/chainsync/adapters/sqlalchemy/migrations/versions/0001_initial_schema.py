"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-09-28 10:12:41.118203
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _audit_columns() -> list[sa.Column[object]]:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        "branches",
        *_audit_columns(),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("api_endpoint", sa.String(length=512), nullable=True),
        sa.Column("api_key", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_branches"),
        sa.UniqueConstraint("code", name="uq_branches_code"),
    )
    op.create_table(
        "customers",
        *_audit_columns(),
        sa.Column("onec_id", sa.String(length=255), nullable=True),
        sa.Column("customer_code", sa.String(length=64), nullable=True),
        sa.Column("loyalty_card_number", sa.String(length=64), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", _enum("gender", "male", "female", "other"), nullable=True),
        sa.Column("loyalty_points", sa.Integer(), nullable=False),
        sa.Column("discount_percentage", sa.Float(), nullable=False),
        sa.Column("is_vip", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("extra_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_customers"),
        sa.UniqueConstraint("onec_id", name="uq_customers_onec_id"),
        sa.UniqueConstraint("customer_code", name="uq_customers_customer_code"),
        sa.UniqueConstraint("loyalty_card_number", name="uq_customers_loyalty_card_number"),
    )
    op.create_index("ix_customers_phone", "customers", ["phone"])
    op.create_table(
        "employees",
        *_audit_columns(),
        sa.Column("onec_id", sa.String(length=255), nullable=False),
        sa.Column("employee_code", sa.String(length=64), nullable=False),
        sa.Column("branch_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            _enum("employee_role", "admin", "manager", "supervisor", "cashier"),
            nullable=False,
        ),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("salary", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column(
            "status",
            _enum("employee_status", "active", "inactive", "terminated"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["branch_id"], ["branches.id"], name="fk_employees_branch_id_branches"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_employees"),
        sa.UniqueConstraint("onec_id", name="uq_employees_onec_id"),
        sa.UniqueConstraint(
            "employee_code", "branch_id", name="uq_employees_employee_code_branch_id"
        ),
    )
    op.create_table(
        "categories",
        *_audit_columns(),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("onec_id", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["categories.id"], name="fk_categories_parent_id_categories"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
        sa.UniqueConstraint("key", name="uq_categories_key"),
        sa.UniqueConstraint("onec_id", name="uq_categories_onec_id"),
    )
    op.create_table(
        "products",
        *_audit_columns(),
        sa.Column("onec_id", sa.String(length=255), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("barcode", sa.String(length=100), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Uuid(), nullable=True),
        sa.Column("brand", sa.String(length=100), nullable=True),
        sa.Column("unit_of_measure", sa.String(length=20), nullable=False),
        sa.Column("base_price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("cost", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("tax_rate", sa.Float(), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["category_id"], ["categories.id"], name="fk_products_category_id_categories"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
        sa.UniqueConstraint("onec_id", name="uq_products_onec_id"),
        sa.UniqueConstraint("sku", name="uq_products_sku"),
        sa.UniqueConstraint("barcode", name="uq_products_barcode"),
    )
    for table_name in ("branch_inventory", "branch_product_pricing"):
        columns: list[sa.Column[object]] = [
            *_audit_columns(),
            sa.Column("branch_id", sa.Uuid(), nullable=False),
            sa.Column("product_id", sa.Uuid(), nullable=False),
        ]
        if table_name == "branch_inventory":
            columns += [
                sa.Column("quantity_in_stock", sa.Float(), nullable=False),
                sa.Column("min_stock_level", sa.Float(), nullable=True),
                sa.Column("max_stock_level", sa.Float(), nullable=True),
            ]
        else:
            columns += [
                sa.Column("price", sa.Numeric(precision=12, scale=2), nullable=False),
                sa.Column("cost", sa.Numeric(precision=12, scale=2), nullable=True),
                sa.Column("effective_from", sa.DateTime(timezone=True), nullable=True),
                sa.Column("is_available", sa.Boolean(), nullable=False),
            ]
        op.create_table(
            table_name,
            *columns,
            sa.ForeignKeyConstraint(
                ["branch_id"], ["branches.id"], name=f"fk_{table_name}_branch_id_branches"
            ),
            sa.ForeignKeyConstraint(
                ["product_id"], ["products.id"], name=f"fk_{table_name}_product_id_products"
            ),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table_name}"),
            sa.UniqueConstraint(
                "branch_id", "product_id", name=f"uq_{table_name}_branch_id_product_id"
            ),
        )
    op.create_table(
        "sync_logs",
        *_audit_columns(),
        sa.Column(
            "entity_type",
            _enum(
                "entity_type",
                "customers",
                "employees",
                "categories",
                "products",
                "inventory",
                "prices",
            ),
            nullable=False,
        ),
        sa.Column("direction", _enum("sync_direction", "import", "export"), nullable=False),
        sa.Column(
            "status",
            _enum("sync_status", "in_progress", "completed", "failed"),
            nullable=False,
        ),
        sa.Column("records_total", sa.Integer(), nullable=False),
        sa.Column("records_processed", sa.Integer(), nullable=False),
        sa.Column("records_failed", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_sync_logs"),
    )
    op.create_index("ix_sync_logs_started_at", "sync_logs", ["started_at"])
    op.create_index("ix_sync_logs_status", "sync_logs", ["status"])


def downgrade() -> None:
    op.drop_index("ix_sync_logs_status", table_name="sync_logs")
    op.drop_index("ix_sync_logs_started_at", table_name="sync_logs")
    op.drop_table("sync_logs")
    op.drop_table("branch_product_pricing")
    op.drop_table("branch_inventory")
    op.drop_table("products")
    op.drop_table("categories")
    op.drop_table("employees")
    op.drop_index("ix_customers_phone", table_name="customers")
    op.drop_table("customers")
    op.drop_table("branches")
