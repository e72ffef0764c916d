from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from chainsync.api import create_app
from tests.support.branches import seed_branch, seed_customer

if TYPE_CHECKING:
    from collections.abc import Callable

    from chainsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork
    from tests.support.branches import RecordingPusher

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]

pytestmark = pytest.mark.integration


@pytest.fixture
def client(sqlite_unit_of_work: UowFactory, pusher: RecordingPusher) -> TestClient:
    return TestClient(create_app(unit_of_work_factory=sqlite_unit_of_work, pusher=pusher))


def test_import_reports_per_record_results(client: TestClient) -> None:
    response = client.post(
        "/api/erp/customers",
        json=[{"oneC_id": "E1", "customer_code": "C1", "name": "Alice"}, {"name": ""}],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert (data["imported"], data["failed"]) == (1, 1)
    assert data["results"][0]["action"] == "created"
    assert data["results"][0]["identifiers"] == {
        "onec_id": "E1",
        "customer_code": "C1",
        "name": "Alice",
    }
    assert data["results"][1] == {
        "index": 1,
        "identifiers": {"name": ""},
        "success": False,
        "error": "name is required",
        "error_code": "validation_error",
    }


def test_import_accepts_enveloped_records(client: TestClient) -> None:
    response = client.post("/api/erp/customers", json={"records": [{"onec_id": "E1", "name": "A"}]})

    assert response.status_code == 200
    assert response.json()["data"]["imported"] == 1


def test_all_failed_batch_is_a_client_error(client: TestClient) -> None:
    response = client.post("/api/erp/customers", json=[{"name": "No id"}])

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "validation_error"
    assert body["data"]["failed"] == 1


def test_declared_total_must_match(client: TestClient) -> None:
    response = client.post("/api/erp/customers?total=2", json=[{"onec_id": "E1", "name": "A"}])

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert "declared total 2" in response.json()["error"]


@pytest.mark.parametrize(
    ("path", "body"),
    [
        ("/api/erp/suppliers", []),
        ("/api/erp/customers", {"rows": []}),
        ("/api/erp/customers?total=-1", []),
    ],
)
def test_malformed_requests_are_rejected(client: TestClient, path: str, body: object) -> None:
    response = client.post(path, json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["code"] == "validation_error"


def test_product_import_distributes_to_branches(
    client: TestClient, sqlite_unit_of_work: UowFactory, pusher: RecordingPusher
) -> None:
    seed_branch(sqlite_unit_of_work, "B1")
    seed_branch(sqlite_unit_of_work, "B2")
    pusher.failing.add("B2")

    response = client.post(
        "/api/erp/products",
        json=[{"onec_id": "P-1", "sku": "S-1", "name": "Tea", "base_price": 3, "cost": 2}],
    )

    assert response.status_code == 200
    (result,) = response.json()["data"]["results"]
    assert result["success"] is True
    assert result["distribution"] == [
        {"branch_code": "B1", "delivered": True},
        {"branch_code": "B2", "delivered": False, "error": "branch B2 responded with HTTP 503"},
    ]


def test_entity_lookup_update_and_deactivate(
    client: TestClient, sqlite_unit_of_work: UowFactory
) -> None:
    seed_customer(sqlite_unit_of_work, onec_id="E1", customer_code="C1", name="Alice")

    fetched = client.get("/api/erp/customers/C1")
    updated = client.put("/api/erp/customers/E1", json={"phone": "555-0100"})
    deactivated = client.delete("/api/erp/customers/E1")

    assert fetched.status_code == 200
    assert fetched.json()["data"]["onec_id"] == "E1"
    assert updated.json()["data"]["changed"] == ["phone"]
    assert updated.json()["data"]["entity"]["name"] == "Alice"
    assert deactivated.json()["data"]["entity"]["is_active"] is False


def test_categories_are_imported_and_addressable_by_key(client: TestClient) -> None:
    imported = client.post(
        "/api/erp/categories",
        json=[{"key": "food", "name": "Food"}, {"key": "bakery", "name": "Bakery"}],
    )
    moved = client.put("/api/erp/categories/bakery", json={"parent_key": "food"})
    fetched = client.get("/api/erp/categories/bakery")

    assert imported.json()["data"]["imported"] == 2
    assert moved.json()["data"]["changed"] == ["parent_id"]
    assert fetched.status_code == 200
    assert fetched.json()["data"]["parent_key"] == "food"


def test_error_codes_map_to_http_statuses(
    client: TestClient, sqlite_unit_of_work: UowFactory
) -> None:
    seed_customer(sqlite_unit_of_work, customer_code="C1", phone="555", name="A")
    seed_customer(sqlite_unit_of_work, customer_code="C2", phone="555", name="B")

    missing = client.get("/api/erp/customers/nobody")
    ambiguous = client.get("/api/erp/customers/555")
    conflicting = client.put("/api/erp/customers/C1", json={"customer_code": "C2"})
    invalid = client.put("/api/erp/customers/C1", json={"email": "not-an-email"})
    not_addressable = client.get("/api/erp/inventory/anything")

    assert (missing.status_code, missing.json()["code"]) == (404, "not_found")
    assert (ambiguous.status_code, ambiguous.json()["code"]) == (409, "resolution_conflict")
    assert (conflicting.status_code, conflicting.json()["code"]) == (409, "persistence_conflict")
    assert (invalid.status_code, invalid.json()["code"]) == (400, "validation_error")
    assert not_addressable.status_code == 400


def test_sync_log_endpoints(client: TestClient) -> None:
    client.post("/api/erp/customers", json=[{"onec_id": "E1", "name": "A"}])
    client.post("/api/erp/products", json=[{"name": "incomplete"}])

    listed = client.get("/api/erp/sync-logs", params={"entity_type": "customers"})
    (entry,) = listed.json()["data"]
    single = client.get(f"/api/erp/sync-logs/{entry['id']}")
    summary = client.get("/api/erp/sync-logs/summary", params={"days": 7})
    missing = client.get(f"/api/erp/sync-logs/{uuid4()}")

    assert entry["status"] == "completed"
    assert entry["records_processed"] == 1
    assert single.json()["data"]["id"] == entry["id"]
    health = summary.json()["data"]
    assert health["days"] == 7
    assert health["system_status"] == "healthy"
    assert health["health"]["completed_last_24h"] == 2
    assert {group["entity_type"] for group in health["groups"]} == {"customers", "products"}
    assert missing.status_code == 404


def test_sync_log_cleanup_uses_retention(client: TestClient) -> None:
    client.post("/api/erp/customers", json=[{"onec_id": "E1", "name": "A"}])

    response = client.delete("/api/erp/sync-logs", params={"older_than_days": 30})
    rejected = client.delete("/api/erp/sync-logs", params={"older_than_days": 0})

    assert response.json()["data"] == {"deleted": 0, "older_than_days": 30}
    assert rejected.status_code == 400
