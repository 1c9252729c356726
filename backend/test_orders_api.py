"""
HTTP tests for /orders, /admin and the public endpoints.
"""
from functools import partial

from fastapi.testclient import TestClient

from medinv.core.config import Settings
from medinv.main import create_app
from medinv.models import Order, OrderItem


def count_rows(client, probe, model, **filters):
    return client.portal.call(partial(probe.count, client.app.state.database, model, **filters))


def stock_of(client, probe, medicine_id):
    return client.portal.call(probe.stock, client.app.state.database, medicine_id)


def test_create_order_returns_201_with_order_id(client, auth_headers, probe):
    response = client.post(
        "/orders",
        json={
            "patient_id": 1,
            "supplier_id": 1,
            "employee_id": 1,
            "items": [{"medicine_id": 1, "quantity": 7}],
            "updateInventory": True,
        },
        headers=auth_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert isinstance(body["orderId"], int)
    assert body["message"] == "Order created successfully"
    assert body["unreservedItems"] == []

    assert count_rows(client, probe, OrderItem, order_id=body["orderId"]) == 1
    assert stock_of(client, probe, 1) == 13


def test_create_order_reports_unreserved_items(client, auth_headers, probe):
    response = client.post(
        "/orders",
        json={"patient_id": 1, "items": [{"medicine_id": 2, "quantity": 10}], "updateInventory": True},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["unreservedItems"] == [2]
    assert "insufficient stock" in body["message"]
    assert stock_of(client, probe, 2) == 5


def test_missing_patient_is_400_with_error(client, auth_headers, probe):
    response = client.post("/orders", json={"items": [{"medicine_id": 1, "quantity": 1}]}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Patient ID and at least one item are required"}
    assert count_rows(client, probe, Order) == 0


def test_empty_items_is_400(client, auth_headers):
    response = client.post("/orders", json={"patient_id": 1, "items": []}, headers=auth_headers)
    assert response.status_code == 400
    assert "error" in response.json()


def test_wrong_field_type_is_400_not_422(client, auth_headers):
    response = client.post(
        "/orders",
        json={"patient_id": "not-a-number", "items": [{"medicine_id": 1, "quantity": 1}]},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert "patient_id" in response.json()["error"]


def test_storage_failure_is_500_with_details(client, auth_headers, probe):
    response = client.post(
        "/orders",
        json={"patient_id": 1, "items": [{"medicine_id": 1, "quantity": 1}, {"medicine_id": 999, "quantity": 1}]},
        headers=auth_headers,
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to create order"
    assert "FOREIGN KEY" in body["details"].upper()
    assert count_rows(client, probe, Order) == 0


def test_strict_policy_short_stock_is_409(client, auth_headers, probe):
    client.app.state.settings.ORDER_STOCK_POLICY = "strict"

    response = client.post(
        "/orders",
        json={"patient_id": 1, "items": [{"medicine_id": 2, "quantity": 10}], "updateInventory": True},
        headers=auth_headers,
    )

    assert response.status_code == 409
    assert response.json()["error"] == "Insufficient stock"
    assert count_rows(client, probe, Order) == 0


def test_list_orders(client, auth_headers):
    created = client.post(
        "/orders",
        json={"patient_id": 1, "items": [{"medicine_id": 1, "quantity": 1}, {"medicine_id": 3, "quantity": 2}]},
        headers=auth_headers,
    ).json()

    response = client.get("/orders", headers=auth_headers)

    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 2
    assert {row["order_id"] for row in rows} == {created["orderId"]}
    assert {row["medicine_name"] for row in rows} == {"Paracetamol", "Loratadine"}
    assert all(row["patient_name"] == "John Doe" for row in rows)
    assert all(row["log_date"] == "2025-05-15" for row in rows)


def test_orders_require_a_session(client):
    assert client.get("/orders").status_code == 401
    assert client.post("/orders", json={"patient_id": 1, "items": []}).status_code == 401


def test_close_all_connections_keeps_service_usable(client, auth_headers):
    response = client.post("/admin/connections/close", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["pool"]["in_use"] == 0

    after = client.post(
        "/orders", json={"patient_id": 2, "items": [{"medicine_id": 1, "quantity": 1}]}, headers=auth_headers
    )
    assert after.status_code == 201


def test_connection_stats(client, auth_headers):
    stats = client.get("/admin/connections", headers=auth_headers).json()
    assert stats["initialized"] is True
    assert stats["in_use"] == 0
    assert stats["limit"] == client.app.state.settings.DB_CONNECTION_LIMIT


def test_health_and_deployment_mode_are_public(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"

    mode = client.get("/deployment-mode")
    assert mode.status_code == 200
    assert mode.json() == {"mode": "local"}


def test_unstorable_quantity_is_500_json(client, auth_headers, probe):
    response = client.post(
        "/orders",
        json={"patient_id": 1, "items": [{"medicine_id": 1, "quantity": 2 ** 63}]},
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["error"] == "Failed to create order"
    assert body["details"]
    assert count_rows(client, probe, Order) == 0


def test_patient_id_zero_is_400(client, auth_headers):
    response = client.post(
        "/orders", json={"patient_id": 0, "items": [{"medicine_id": 1, "quantity": 1}]}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Patient ID and at least one item are required"}


def test_exhausted_pool_is_503(tmp_path, settings, auth_headers, pool_holder):
    tight = Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'tight_pool.db'}",
        SECRET_KEY=settings.SECRET_KEY,
        DB_CONNECTION_LIMIT=1,
        DB_QUEUE_LIMIT=1,
        DB_ACQUIRE_TIMEOUT_SECONDS=5.0,
    )
    app = create_app(tight)

    with TestClient(app) as tight_client:
        database = app.state.database
        tight_client.portal.call(pool_holder.start, database)

        response = tight_client.post(
            "/orders", json={"patient_id": 1, "items": [{"medicine_id": 1, "quantity": 1}]}, headers=auth_headers
        )

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "Database connection limit reached"
        assert body["details"]

        tight_client.portal.call(pool_holder.stop)
        assert database.stats()["in_use"] == 0
        assert database.stats()["waiting"] == 0
