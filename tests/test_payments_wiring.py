"""
API tests over the production dependency wiring: only the database is
swapped, the gateway comes from PaymentSettings like in a deployment.
"""
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.settings import payment_settings


pytestmark = pytest.mark.asyncio

BASE = "/api/v1/payments"


@pytest.fixture
def stripe_without_key(monkeypatch):
    monkeypatch.setattr(payment_settings, "default_provider", "stripe")
    monkeypatch.setattr(payment_settings.stripe, "secret_key", None)


@pytest.fixture
def sandbox_provider(monkeypatch):
    monkeypatch.setattr(payment_settings, "default_provider", "sandbox")


@pytest_asyncio.fixture
async def client(wired_app):
    transport = ASGITransport(app=wired_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _cash_body() -> dict:
    return {"amount": "29.99", "method": "Cash", "service_id": str(uuid.uuid4())}


async def test_missing_token_is_401_even_when_gateway_unconfigured(stripe_without_key, client):
    resp = await client.get(BASE)
    assert resp.status_code == 401

    resp = await client.post(BASE, json=_cash_body())
    assert resp.status_code == 401


async def test_cash_lifecycle_never_needs_the_gateway(stripe_without_key, client, auth_header):
    resp = await client.post(BASE, json=_cash_body(), headers=auth_header("Admin"))
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert created["status"] == "Pending"
    pid = created["id"]

    resp = await client.get(BASE, headers=auth_header("Receptionist"))
    assert resp.status_code == 200
    assert resp.json()["data"]["total"] == 1

    resp = await client.get(f"{BASE}/{pid}", headers=auth_header("Member"))
    assert resp.status_code == 200

    resp = await client.put(
        f"{BASE}/{pid}",
        json={"id": pid, "status": "Completed"},
        headers=auth_header("Receptionist"),
    )
    assert resp.status_code == 200

    resp = await client.post(f"{BASE}/{pid}/refund", headers=auth_header("Receptionist"))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "Refunded"

    resp = await client.delete(f"{BASE}/{pid}", headers=auth_header("Admin"))
    assert resp.status_code == 200


async def test_card_payment_through_configured_sandbox(sandbox_provider, client, auth_header):
    body = {"amount": "60.00", "method": "Card", "service_id": str(uuid.uuid4())}
    resp = await client.post(BASE, json=body, headers=auth_header("Member"))
    assert resp.status_code == 201
    pid = resp.json()["data"]["id"]
    assert resp.json()["data"]["status"] == "Completed"

    resp = await client.post(f"{BASE}/{pid}/refund", headers=auth_header("Admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "Refunded"
