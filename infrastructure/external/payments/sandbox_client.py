"""
Offline gateway for development and demos.

Every charge succeeds unless the amount is above `decline_above`; ids are
deterministic per idempotency key so repeated calls return the same result.
"""
from __future__ import annotations

import hashlib
import uuid
from decimal import Decimal
from typing import Optional

from application.dtos.payments import ChargeResult, RefundResult
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import PaymentProviderError


class SandboxGateway(BasePaymentClient):
    provider = "sandbox"

    def __init__(self, decline_above: Optional[Decimal] = None):
        self.decline_above = decline_above

    @staticmethod
    def _token(idempotency_key: str | None) -> str:
        if idempotency_key:
            return hashlib.sha256(idempotency_key.encode()).hexdigest()[:24]
        return uuid.uuid4().hex[:24]

    async def create_charge(
        self,
        amount: Decimal,
        currency: str,
        *,
        reference: str,
        idempotency_key: str | None = None,
    ) -> ChargeResult:
        if self.decline_above is not None and amount > self.decline_above:
            raise PaymentProviderError(
                "Card declined",
                provider=self.provider,
                provider_code="card_declined",
                details={"reference": reference},
            )
        charge_id = f"sandbox_ch_{self._token(idempotency_key)}"
        self._log(
            "sandbox_charge_captured",
            charge_id=charge_id,
            amount_minor=self._to_minor(amount, currency),
            currency=currency,
            reference=reference,
        )
        return ChargeResult(charge_id=charge_id, status=self._map_status("captured"), provider=self.provider)

    async def refund(self, charge_id: str, *, idempotency_key: str | None = None) -> RefundResult:
        refund_id = f"sandbox_re_{self._token(idempotency_key)}"
        self._log("sandbox_refund_issued", refund_id=refund_id, charge_id=charge_id)
        return RefundResult(
            refund_id=refund_id,
            status=self._map_refund_status("refunded"),
            provider=self.provider,
            charge_id=charge_id,
        )
