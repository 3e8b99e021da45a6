from decimal import Decimal

import pytest

from application.ports.payment_gateway import PaymentGateway
from domain.common.exceptions import PaymentGatewayException
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.sandbox_client import SandboxGateway


def test_factory_selects_sandbox():
    gw = get_payment_gateway("sandbox")
    assert isinstance(gw, SandboxGateway)
    assert isinstance(gw, PaymentGateway)


def test_factory_uses_default_provider():
    # tests run with PAYMENT__DEFAULT_PROVIDER=sandbox
    assert isinstance(get_payment_gateway(), SandboxGateway)


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        get_payment_gateway("paypal")


@pytest.mark.asyncio
async def test_sandbox_charge_and_refund_are_deterministic():
    gw = SandboxGateway()
    first = await gw.create_charge(Decimal("10.00"), "USD", reference="p1", idempotency_key="k1")
    again = await gw.create_charge(Decimal("10.00"), "USD", reference="p1", idempotency_key="k1")

    assert first.charge_id.startswith("sandbox_ch_")
    assert first.charge_id == again.charge_id
    assert first.status == "Completed"

    refund = await gw.refund(first.charge_id, idempotency_key="r1")
    assert refund.refund_id.startswith("sandbox_re_")
    assert refund.charge_id == first.charge_id
    assert refund.status == "Refunded"


@pytest.mark.asyncio
async def test_sandbox_declines_above_threshold():
    gw = SandboxGateway(decline_above=Decimal("100"))
    with pytest.raises(PaymentGatewayException) as ei:
        await gw.create_charge(Decimal("100.01"), "USD", reference="p1")
    assert ei.value.details["provider"] == "sandbox"
    assert ei.value.details["provider_code"] == "card_declined"
