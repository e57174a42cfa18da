"""Unit tests for the /api/v1/requests routes and the error mapping."""

import inspect

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.api.routes.requests import get_request_service, router
from tests.helpers.subjects import BIRTH_SUBJECT


@pytest.fixture
def client(service):
    app.dependency_overrides[get_request_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def create(client, **overrides) -> dict:
    body = {
        "document_type_id": "birth-extract",
        "delivery_method": "download",
        "subject_data": BIRTH_SUBJECT,
        "citizen_id": "citizen-1",
    }
    body.update(overrides)
    response = client.post("/api/v1/requests", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:

    def test_created(self, client) -> None:
        data = create(client)
        assert data["reference"] == "REQ-2025-001"
        assert data["status"] == "pending"
        assert data["price"] == 5000
        assert data["payment"]["status"] == "pending"

    def test_delivery_with_address(self, client) -> None:
        data = create(client, delivery_method="delivery", address="Abobo", phone_number="0700000000", total=7000)
        assert data["price"] == 7000
        assert data["address"] == "Abobo"

    def test_invalid_delivery_is_422(self, client) -> None:
        response = client.post(
            "/api/v1/requests",
            json={"document_type_id": "birth-extract", "delivery_method": "drone", "subject_data": BIRTH_SUBJECT},
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_DELIVERY_METHOD"

    def test_unprintable_name_is_422(self, client) -> None:
        response = client.post(
            "/api/v1/requests",
            json={
                "document_type_id": "birth-extract",
                "delivery_method": "download",
                "subject_data": {**BIRTH_SUBJECT, "childLastName": "Nguyễn"},
            },
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNPRINTABLE_FIELD"

    def test_price_mismatch_is_422(self, client) -> None:
        response = client.post(
            "/api/v1/requests",
            json={
                "document_type_id": "birth-extract",
                "delivery_method": "download",
                "subject_data": BIRTH_SUBJECT,
                "total": 4000,
            },
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"] == {"expected": 5000, "supplied": 4000}


class TestLifecycleRoutes:

    def test_guard_failure_is_409(self, client) -> None:
        request_id = create(client)["id"]
        response = client.post(f"/api/v1/requests/{request_id}/approve", json={"staff_id": "staff-1"})
        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "INVALID_TRANSITION"
        assert error["retryable"] is False

    def test_unknown_request_is_404(self, client) -> None:
        response = client.get("/api/v1/requests/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"]["category"] == "not_found"

    def test_full_flow(self, client) -> None:
        request_id = create(client)["id"]
        staff = {"staff_id": "staff-1"}

        assert client.post(f"/api/v1/requests/{request_id}/start-review", json=staff).json()["status"] == "processing"

        handle = client.post(f"/api/v1/requests/{request_id}/payment", json={"method": "card"}).json()
        assert handle["amount"] == 5000 and handle["currency"] == "XOF"

        paid = client.post(
            f"/api/v1/requests/{request_id}/payment-status",
            json={"external_reference": "txn-1", "status": "succeeded"},
        ).json()
        assert paid["payment"]["status"] == "paid"

        approved = client.post(f"/api/v1/requests/{request_id}/approve", json=staff).json()
        assert approved["status"] == "completed"
        assert len(approved["events"]) == 2

        document = client.post(f"/api/v1/requests/{request_id}/generate-document", json=staff).json()
        assert document["url"].startswith("http://files.test/documents/REQ-2025-001/")

        redirect = client.get(f"/api/v1/requests/{request_id}/document", follow_redirects=False)
        assert redirect.status_code == 307
        assert redirect.headers["location"] == document["url"]

        by_ref = client.get("/api/v1/requests/by-reference/REQ-2025-001").json()
        assert by_ref["generated_document"]["file_name"] == document["file_name"]

    def test_reject(self, client) -> None:
        request_id = create(client)["id"]
        client.post(f"/api/v1/requests/{request_id}/start-review", json={"staff_id": "staff-1"})
        data = client.post(
            f"/api/v1/requests/{request_id}/reject",
            json={"staff_id": "staff-1", "reason": "documents incomplets"},
        ).json()
        assert data["status"] == "rejected"
        assert data["tracking"]["rejection_reason"] == "documents incomplets"

    def test_document_missing_is_404(self, client) -> None:
        request_id = create(client)["id"]
        assert client.get(f"/api/v1/requests/{request_id}/document", follow_redirects=False).status_code == 404

    def test_notes(self, client) -> None:
        request_id = create(client)["id"]
        data = client.post(
            f"/api/v1/requests/{request_id}/notes", json={"author": "staff-1", "content": "pièce reçue"}
        ).json()
        assert data["notes"][0]["content"] == "pièce reçue"


class TestListing:

    def test_list_and_statistics(self, client) -> None:
        create(client)
        create(client, citizen_id="citizen-2")

        listing = client.get("/api/v1/requests", params={"citizen_id": "citizen-2"}).json()
        assert listing["total"] == 1

        stats = client.get("/api/v1/requests/statistics").json()
        assert stats["total"] == 2
        assert stats["by_status"]["pending"] == 2

    def test_bad_status_filter_is_422(self, client) -> None:
        assert client.get("/api/v1/requests", params={"status": "archived"}).status_code == 422


class TestHealth:

    def test_ok(self) -> None:
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestHandlers:

    def test_blocking_handlers_run_in_threadpool(self) -> None:
        """Request handlers do blocking I/O, so none of them is a coroutine."""
        endpoints = [route.endpoint for route in router.routes]
        assert endpoints
        assert not [e.__name__ for e in endpoints if inspect.iscoroutinefunction(e)]
