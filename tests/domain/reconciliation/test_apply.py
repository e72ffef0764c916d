from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, cast

import pytest

from chainsync.domain.model import Customer, LedgerAction, Product
from chainsync.domain.reconciliation import (
    EntityNotFoundError,
    apply_record,
    coalesce,
    profile_for,
)

if TYPE_CHECKING:
    from chainsync.domain.ports import ReconciliationRepositories


class ListRepository:
    def __init__(self) -> None:
        self.added: list[Any] = []

    def add(self, entity: Any) -> None:
        self.added.append(entity)


def _repositories() -> ReconciliationRepositories:
    return cast(
        "ReconciliationRepositories",
        SimpleNamespace(customers=ListRepository(), products=ListRepository()),
    )


def test_coalesce_only_touches_present_attributes() -> None:
    customer = Customer(name="Alice", email="a@example.com", notes="vip")

    changed = coalesce(customer, {"name": "Alice Smith", "notes": None})

    assert changed == ["name", "notes"]
    assert customer.email == "a@example.com"
    assert customer.notes is None


def test_coalesce_skips_unchanged_values() -> None:
    customer = Customer(name="Alice", phone="555")

    assert coalesce(customer, {"name": "Alice", "phone": "555"}) == []


def test_coalesce_never_blanks_identifier_columns() -> None:
    customer = Customer(name="Alice", onec_id="E1", customer_code="C1")

    changed = coalesce(
        customer,
        {"onec_id": None, "customer_code": " ", "phone": None},
        identifier_columns=frozenset({"onec_id", "customer_code", "phone"}),
    )

    assert changed == []
    assert (customer.onec_id, customer.customer_code) == ("E1", "C1")


def test_apply_record_creates_with_defaults() -> None:
    repositories = _repositories()
    now = datetime(2024, 5, 1, tzinfo=UTC)

    applied = apply_record(
        None,
        {"onec_id": "E1", "name": "Alice", "branch": object()},
        profile_for("customers"),
        repositories,
        now=now,
    )

    customer = cast(Customer, applied.entity)
    assert applied.action is LedgerAction.CREATED
    assert repositories.customers.added == [customer]  # type: ignore[attr-defined]
    assert (customer.loyalty_points, customer.is_vip, customer.is_active) == (0, False, True)
    assert customer.created_at == customer.updated_at == now


def test_apply_record_updates_existing_entity_in_place() -> None:
    existing = Product(onec_id="P-1", sku="S-1", name="Tea", base_price=2.0, cost=1.0)
    repositories = _repositories()

    applied = apply_record(
        existing, {"sku": "S-1", "base_price": 2.5}, profile_for("products"), repositories
    )

    assert applied.entity is existing
    assert applied.action is LedgerAction.UPDATED
    assert existing.base_price == 2.5
    assert existing.updated_at is not None
    assert repositories.products.added == []  # type: ignore[attr-defined]


def test_price_updates_never_create_products() -> None:
    with pytest.raises(EntityNotFoundError, match="product not found"):
        apply_record(None, {"base_price": 3.0}, profile_for("prices"), _repositories())
