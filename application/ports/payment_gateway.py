"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from application.dtos.payments import ChargeResult, RefundResult


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for card processors.

    Implementations raise PaymentGatewayException (or a subclass) on failure.
    """

    provider: str

    async def create_charge(
        self,
        amount: Decimal,
        currency: str,
        *,
        reference: str,
        idempotency_key: str | None = None,
    ) -> ChargeResult: ...

    async def refund(self, charge_id: str, *, idempotency_key: str | None = None) -> RefundResult: ...
