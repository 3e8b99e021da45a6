import uuid

import pytest


pytestmark = pytest.mark.asyncio

BASE = "/api/v1/payments"


async def _create(client, auth_header, method="Cash", amount="29.99", role="Admin"):
    return await client.post(
        BASE,
        json={"amount": amount, "method": method, "service_id": str(uuid.uuid4())},
        headers=auth_header(role),
    )


async def test_routes_registered():
    from main import app
    routes = {r.path for r in app.routes}
    assert BASE in routes
    assert f"{BASE}/{{payment_id}}" in routes
    assert f"{BASE}/{{payment_id}}/refund" in routes


async def test_health_is_public(api_client):
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}


async def test_missing_token_is_401(api_client):
    resp = await api_client.get(BASE)
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] != 0
    assert body["error"]["type"] == "HTTPError"
    assert resp.headers.get("www-authenticate") == "Bearer"


async def test_invalid_token_is_401(api_client):
    resp = await api_client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_member_cannot_list(api_client, auth_header):
    resp = await api_client.get(BASE, headers=auth_header("Member"))
    assert resp.status_code == 403


async def test_receptionist_cannot_create(api_client, auth_header):
    resp = await _create(api_client, auth_header, role="Receptionist")
    assert resp.status_code == 403


async def test_create_get_update_refund_flow(api_client, auth_header):
    resp = await _create(api_client, auth_header, role="Member")
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert created["status"] == "Pending"
    assert created["amount"] == "29.99"
    pid = created["id"]

    resp = await api_client.get(f"{BASE}/{pid}", headers=auth_header("Member"))
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == pid

    resp = await api_client.put(
        f"{BASE}/{pid}",
        json={"id": pid, "status": "Completed", "version": created["version"]},
        headers=auth_header("Receptionist"),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "Completed"

    resp = await api_client.post(f"{BASE}/{pid}/refund", headers=auth_header("Receptionist"))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "Refunded"


async def test_card_payment_completed_on_create(api_client, auth_header, gateway):
    resp = await _create(api_client, auth_header, method="Card", amount="50.00")
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "Completed"
    assert len(gateway.charges) == 1


async def test_card_gateway_failure_is_502(api_client, auth_header, gateway):
    gateway.fail_charge = True
    resp = await _create(api_client, auth_header, method="Card")
    assert resp.status_code == 502
    assert resp.json()["error"]["type"] == "PaymentGatewayError"


async def test_invalid_amount_is_422(api_client, auth_header):
    resp = await _create(api_client, auth_header, amount="0")
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "ValidationError"


async def test_invalid_transition_is_409(api_client, auth_header):
    pid = (await _create(api_client, auth_header)).json()["data"]["id"]
    resp = await api_client.put(
        f"{BASE}/{pid}",
        json={"id": pid, "status": "Refunded"},
        headers=auth_header("Admin"),
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["field"] == "status"


async def test_stale_version_is_409(api_client, auth_header):
    created = (await _create(api_client, auth_header)).json()["data"]
    pid = created["id"]
    first = await api_client.put(
        f"{BASE}/{pid}",
        json={"id": pid, "status": "Completed", "version": created["version"]},
        headers=auth_header("Admin"),
    )
    assert first.status_code == 200

    resp = await api_client.put(
        f"{BASE}/{pid}",
        json={"id": pid, "status": "Refunded", "version": created["version"]},
        headers=auth_header("Admin"),
    )
    assert resp.status_code == 409


async def test_id_mismatch_is_400(api_client, auth_header):
    pid = (await _create(api_client, auth_header)).json()["data"]["id"]
    resp = await api_client.put(
        f"{BASE}/{pid}",
        json={"id": str(uuid.uuid4()), "status": "Completed"},
        headers=auth_header("Admin"),
    )
    assert resp.status_code == 400


async def test_refund_pending_is_409(api_client, auth_header):
    pid = (await _create(api_client, auth_header)).json()["data"]["id"]
    resp = await api_client.post(f"{BASE}/{pid}/refund", headers=auth_header("Admin"))
    assert resp.status_code == 409


async def test_unknown_payment_is_404(api_client, auth_header):
    resp = await api_client.get(f"{BASE}/{uuid.uuid4()}", headers=auth_header("Admin"))
    assert resp.status_code == 404
    assert resp.json()["error"]["type"] == "PaymentNotFound"


async def test_list_is_paginated(api_client, auth_header):
    for _ in range(3):
        await _create(api_client, auth_header)

    resp = await api_client.get(BASE, params={"page": 1, "size": 2}, headers=auth_header("Receptionist"))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 3
    assert data["pages"] == 2
    assert len(data["items"]) == 2


async def test_list_filters_by_status(api_client, auth_header):
    await _create(api_client, auth_header)
    resp = await api_client.get(BASE, params={"status": "Completed"}, headers=auth_header("Admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["total"] == 0


async def test_delete_is_admin_only(api_client, auth_header):
    pid = (await _create(api_client, auth_header)).json()["data"]["id"]

    resp = await api_client.delete(f"{BASE}/{pid}", headers=auth_header("Receptionist"))
    assert resp.status_code == 403

    resp = await api_client.delete(f"{BASE}/{pid}", headers=auth_header("Admin"))
    assert resp.status_code == 200

    resp = await api_client.get(f"{BASE}/{pid}", headers=auth_header("Admin"))
    assert resp.status_code == 404


@pytest.mark.parametrize("method", ["Cash", "Card"])
@pytest.mark.parametrize("amount", ["0", "-1"])
async def test_non_positive_amount_is_422_for_both_methods(api_client, auth_header, gateway, method, amount):
    resp = await _create(api_client, auth_header, method=method, amount=amount)
    assert resp.status_code == 422
    assert gateway.charges == []


async def test_idempotency_key_header_replays_create(api_client, auth_header, gateway):
    body = {"amount": "45.00", "method": "Card", "service_id": str(uuid.uuid4())}
    headers = {**auth_header("Member"), "Idempotency-Key": "member-checkout-7"}

    first = await api_client.post(BASE, json=body, headers=headers)
    second = await api_client.post(BASE, json=body, headers=headers)

    assert first.status_code == 201 and second.status_code == 201
    assert first.json()["data"]["id"] == second.json()["data"]["id"]
    assert len(gateway.charges) == 1
