import asyncio

import pytest

from app.core.exceptions import GatewayUnavailable

from tests.conftest import signed_notification


async def create_order(client, **overrides):
    body = {"fotoshare_input": "https://fotoshare.co/i/abc123", "qty": 2, "size": "4x6"}
    body.update(overrides)
    response = await client.post("/api/v1/print-orders", json=body)
    assert response.status_code == 200, response.text
    return response.json()


async def get_order(client, admin_headers, order_id):
    response = await client.get(f"/api/v1/admin/orders/{order_id}", headers=admin_headers)
    assert response.status_code == 200, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}


async def test_create_print_order(client, admin_headers):
    data = await create_order(client, customer_name="Ana", customer_email="ana@example.com")

    assert data["ok"] is True
    assert data["amount"] == 20000
    assert data["snap_token"] == "snap-token-1"
    assert data["midtrans_order_id"].startswith("PRINT-")

    order = await get_order(client, admin_headers, data["order_id"])
    assert order["status"] == "PENDING"
    assert order["customer_name"] == "Ana"


@pytest.mark.parametrize(
    "overrides,detail",
    [
        ({"fotoshare_input": ""}, "fotoshare_input required"),
        ({"qty": 21}, "qty must be 1..20"),
        ({"size": "A4"}, "invalid size"),
        ({"fotoshare_input": "https://example.com/i/abc"}, "Only fotoshare.co allowed"),
        ({"customer_email": "nope"}, "invalid email"),
    ],
)
async def test_create_print_order_validation(client, gateway, overrides, detail):
    body = {"fotoshare_input": "abc123", "qty": 1, "size": "4x6"}
    body.update(overrides)
    response = await client.post("/api/v1/print-orders", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == detail
    gateway.create_session.assert_not_awaited()


async def test_gateway_failure_reports_failed_order(client, gateway, admin_headers):
    gateway.create_session.side_effect = GatewayUnavailable('{"error_messages":["Access denied"]}')

    response = await client.post("/api/v1/print-orders", json={"fotoshare_input": "abc123"})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "midtrans_error"
    assert "Access denied" in detail["detail"]
    assert detail["retryable"] is True

    order = await get_order(client, admin_headers, detail["order_id"])
    assert order["status"] == "FAILED"
    assert "Access denied" in order["snap_error"]


async def test_webhook_payment_flow(client, admin_headers):
    data = await create_order(client)
    ref = data["midtrans_order_id"]

    response = await client.post("/api/v1/payments/webhook/midtrans", json=signed_notification(ref, "settlement"))
    assert response.status_code == 200
    assert response.json() == {"ok": True, "result": "applied", "status": "PAID"}
    first = await get_order(client, admin_headers, data["order_id"])
    assert first["paid_at"] is not None

    response = await client.post("/api/v1/payments/webhook/midtrans", json=signed_notification(ref, "settlement"))
    assert response.json()["result"] == "unchanged"
    second = await get_order(client, admin_headers, data["order_id"])
    assert second["paid_at"] == first["paid_at"]

    response = await client.post("/api/v1/admin/mark-printed", json={"id": data["order_id"]}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["order"]["status"] == "PRINTED"

    response = await client.post("/api/v1/admin/mark-printed", json={"id": data["order_id"]}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "precondition_failed"


async def test_webhook_expire(client, admin_headers):
    data = await create_order(client)
    response = await client.post(
        "/api/v1/payments/webhook/midtrans",
        json=signed_notification(data["midtrans_order_id"], "expire", status_code="407"),
    )
    assert response.json()["status"] == "FAILED"
    order = await get_order(client, admin_headers, data["order_id"])
    assert order["status"] == "FAILED"
    assert order["paid_at"] is None


@pytest.mark.parametrize("missing", ["order_id", "status_code", "gross_amount", "signature_key"])
async def test_webhook_bad_payload(client, missing):
    body = signed_notification("PRINT-1-ab", "settlement")
    del body[missing]
    response = await client.post("/api/v1/payments/webhook/midtrans", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "bad_payload"}


async def test_webhook_invalid_json(client):
    response = await client.post(
        "/api/v1/payments/webhook/midtrans",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400


async def test_webhook_invalid_signature_is_acknowledged_without_change(client, admin_headers):
    data = await create_order(client)
    body = signed_notification(data["midtrans_order_id"], "settlement")
    body["gross_amount"] = "1.00"

    response = await client.post("/api/v1/payments/webhook/midtrans", json=body)

    assert response.status_code == 200
    assert response.json() == {"ok": False, "error": "invalid_signature"}
    order = await get_order(client, admin_headers, data["order_id"])
    assert order["status"] == "PENDING"
    assert order["paid_at"] is None


async def test_webhook_unknown_order_is_acknowledged(client):
    response = await client.post("/api/v1/payments/webhook/midtrans", json=signed_notification("PRINT-0-none", "settlement"))
    assert response.status_code == 200
    assert response.json() == {"ok": True, "result": "not_found"}


async def test_webhook_numeric_fields_are_stringified(client):
    body = signed_notification("PRINT-0-none", "settlement", status_code="200", gross_amount="20000")
    body["status_code"] = 200
    body["gross_amount"] = 20000
    response = await client.post("/api/v1/payments/webhook/midtrans", json=body)
    assert response.json()["ok"] is True


async def test_concurrent_mark_printed_over_http(client, admin_headers):
    data = await create_order(client)
    await client.post("/api/v1/payments/webhook/midtrans", json=signed_notification(data["midtrans_order_id"], "capture"))

    responses = await asyncio.gather(
        client.post("/api/v1/admin/mark-printed", json={"id": data["order_id"]}, headers=admin_headers),
        client.post("/api/v1/admin/mark-printed", json={"id": data["order_id"]}, headers=admin_headers),
    )
    assert sorted(r.status_code for r in responses) == [200, 409]


async def test_mark_printed_unknown_order(client, admin_headers):
    response = await client.post(
        "/api/v1/admin/mark-printed",
        json={"id": "00000000-0000-0000-0000-000000000000"},
        headers=admin_headers,
    )
    assert response.status_code == 404


async def test_list_orders(client, admin_headers):
    first = await create_order(client, customer_name="Budi")
    await create_order(client, fotoshare_input="zzz999")
    await client.post("/api/v1/payments/webhook/midtrans", json=signed_notification(first["midtrans_order_id"], "settlement"))

    response = await client.get("/api/v1/admin/orders", params={"needsPrint": "1"}, headers=admin_headers)
    assert response.status_code == 200
    assert [o["id"] for o in response.json()["orders"]] == [first["order_id"]]

    response = await client.get("/api/v1/admin/orders", params={"q": "zzz"}, headers=admin_headers)
    assert [o["fotoshare_token"] for o in response.json()["orders"]] == ["zzz999"]

    response = await client.get("/api/v1/admin/orders", params={"sortField": "created_at", "limit": 1}, headers=admin_headers)
    assert len(response.json()["orders"]) == 1

    response = await client.get("/api/v1/admin/paid-orders", headers=admin_headers)
    assert [o["id"] for o in response.json()["orders"]] == [first["order_id"]]


async def test_list_orders_rejects_bad_filter(client, admin_headers):
    response = await client.get("/api/v1/admin/orders", params={"status": "SHIPPED"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "invalid status"


async def test_admin_routes_require_token(client):
    response = await client.get("/api/v1/admin/orders")
    assert response.status_code in (401, 403)

    response = await client.get("/api/v1/admin/orders", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_login_with_wrong_password(client):
    response = await client.post("/api/v1/admin/auth/login", json={"password": "wrong"})
    assert response.status_code == 401


async def test_login_disabled_without_password(client, test_settings):
    test_settings.admin_password = ""
    response = await client.post("/api/v1/admin/auth/login", json={"password": ""})
    assert response.status_code == 401
