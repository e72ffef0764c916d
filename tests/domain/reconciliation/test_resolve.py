from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from chainsync.domain.model import Customer
from chainsync.domain.reconciliation import (
    EntityNotFoundError,
    IdentifierField,
    IdentifierSet,
    RecordValidationError,
    ResolutionConflictError,
    resolve,
    resolve_identifier_value,
    resolve_reference,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

CUSTOMER_IDENTIFIERS = IdentifierSet(
    label="customer",
    fields=(
        IdentifierField("onec_id", ("onec_id",)),
        IdentifierField("customer_code", ("customer_code",)),
        IdentifierField("phone", ("phone",), unique=False),
    ),
)


class FakeFinder:
    """Serves lookups from an in-memory list and records which identifiers were tried."""

    def __init__(self, *customers: Customer) -> None:
        self.customers = customers
        self.calls: list[str] = []

    def __call__(self, identifier: IdentifierField, key: tuple[object, ...]) -> Sequence[Customer]:
        self.calls.append(identifier.name)
        return tuple(
            customer
            for customer in self.customers
            if tuple(getattr(customer, column) for column in identifier.columns) == key
        )

    def get(self, entity_id: object) -> Customer | None:
        return next((item for item in self.customers if item.id == entity_id), None)


def test_resolve_returns_none_when_nothing_matches() -> None:
    find = FakeFinder(Customer(name="Other", onec_id="E9"))

    assert resolve({"onec_id": "E1", "phone": "555"}, CUSTOMER_IDENTIFIERS, find) is None
    assert find.calls == ["onec_id", "phone"]


def test_resolve_stops_at_first_matching_identifier() -> None:
    by_onec = Customer(name="A", onec_id="E1")
    by_phone = Customer(name="B", phone="555")
    find = FakeFinder(by_onec, by_phone)

    found = resolve({"onec_id": "E1", "phone": "555"}, CUSTOMER_IDENTIFIERS, find)

    assert found is by_onec
    assert find.calls == ["onec_id"]


def test_resolve_falls_through_to_lower_precedence_identifier() -> None:
    by_code = Customer(name="A", customer_code="C1")
    find = FakeFinder(by_code)

    assert resolve({"onec_id": "E1", "customer_code": "C1"}, CUSTOMER_IDENTIFIERS, find) is by_code


def test_resolve_treats_blank_values_as_absent() -> None:
    find = FakeFinder()

    with pytest.raises(RecordValidationError, match="one of onec_id, customer_code, phone"):
        resolve({"onec_id": "  ", "phone": None}, CUSTOMER_IDENTIFIERS, find)
    assert find.calls == []


def test_resolve_raises_on_duplicate_matches() -> None:
    find = FakeFinder(Customer(name="A", phone="555"), Customer(name="B", phone="555"))

    with pytest.raises(ResolutionConflictError) as excinfo:
        resolve({"phone": "555"}, CUSTOMER_IDENTIFIERS, find)

    assert excinfo.value.field == "phone"
    assert excinfo.value.matches == 2
    assert excinfo.value.code == "resolution_conflict"


def test_composite_identifier_needs_every_column() -> None:
    branch_id = uuid4()
    identifier = IdentifierField("employee_code", ("employee_code", "branch_id"))

    assert identifier.value_from({"employee_code": "E001"}) is None
    assert identifier.value_from({"employee_code": "E001", "branch_id": branch_id}) == (
        "E001",
        branch_id,
    )


def test_resolve_reference_requires_a_match() -> None:
    with pytest.raises(EntityNotFoundError, match="customer not found"):
        resolve_reference({"onec_id": "E1"}, CUSTOMER_IDENTIFIERS, FakeFinder())


def test_resolve_identifier_value_prefers_internal_id() -> None:
    target = Customer(name="A", onec_id="E1")
    find = FakeFinder(target)

    assert resolve_identifier_value(str(target.id), CUSTOMER_IDENTIFIERS, find, find.get) is target
    assert find.calls == []
    assert resolve_identifier_value("E1", CUSTOMER_IDENTIFIERS, find, find.get) is target


def test_resolve_identifier_value_reports_unknown_value() -> None:
    find = FakeFinder()

    with pytest.raises(EntityNotFoundError, match="customer 'C404' not found"):
        resolve_identifier_value("C404", CUSTOMER_IDENTIFIERS, find, find.get)
