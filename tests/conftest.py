"""Pytest bootstrap configuration.

Mandatory environment variables are set before any module that reads
application settings is imported.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("PAYMENT__DEFAULT_PROVIDER", "sandbox")

import functools
import time
import uuid
from decimal import Decimal
from typing import Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from application.dtos.payments import ChargeResult, RefundResult
from application.services.payment_service import PaymentApplicationService
from domain.common.exceptions import PaymentGatewayException
from infrastructure.models import Base
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


class StubGateway:
    """Records calls; set `fail_charge` / `fail_refund` to simulate provider errors."""

    provider = "stub"

    def __init__(self):
        self.charges: list[dict] = []
        self.refunds: list[dict] = []
        self.fail_charge = False
        self.fail_refund = False
        self.charge_id: Optional[str] = "ch_stub_1"

    async def create_charge(self, amount: Decimal, currency: str, *, reference: str, idempotency_key=None):
        self.charges.append({
            "amount": amount,
            "currency": currency,
            "reference": reference,
            "idempotency_key": idempotency_key,
        })
        if self.fail_charge:
            raise PaymentGatewayException("Card declined", provider=self.provider, provider_code="card_declined")
        return ChargeResult(charge_id=self.charge_id or "", status="Completed", provider=self.provider)

    async def refund(self, charge_id: str, *, idempotency_key=None):
        self.refunds.append({"charge_id": charge_id, "idempotency_key": idempotency_key})
        if self.fail_refund:
            raise PaymentGatewayException("Refund rejected", provider=self.provider)
        return RefundResult(refund_id="re_stub_1", status="Completed", provider=self.provider, charge_id=charge_id)

    async def aclose(self):
        return None


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def uow_factory(session_factory):
    return functools.partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def payment_service(uow_factory, gateway):
    return PaymentApplicationService(uow_factory=uow_factory, gateway_factory=lambda: gateway, currency="USD")


@pytest.fixture
def make_token():
    def _make(*roles: str, sub: str = "user-1", expires_in: int = 3600, secret: str = "test-secret-key") -> str:
        payload = {
            "sub": sub,
            "unique_name": "tester",
            "role": list(roles),
            "exp": int(time.time()) + expires_in,
        }
        return jwt.encode(payload, secret, algorithm="HS256")
    return _make


@pytest.fixture
def auth_header(make_token):
    def _header(*roles: str) -> dict:
        return {"Authorization": f"Bearer {make_token(*roles)}"}
    return _header


@pytest_asyncio.fixture
async def wired_app(uow_factory):
    """The real app over the test database; gateway wiring is left as configured."""
    from main import app
    from api.dependencies import get_uow_factory

    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(wired_app, gateway):
    from api.dependencies import get_gateway_factory

    wired_app.dependency_overrides[get_gateway_factory] = lambda: (lambda: gateway)
    transport = ASGITransport(app=wired_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def service_id():
    return uuid.uuid4()
