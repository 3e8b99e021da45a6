"""
Base payment client with the shared concerns: status mapping, amount
conversion and structured logging.

Concrete providers subclass and implement create_charge/refund.
"""
from __future__ import annotations

from decimal import Decimal

from core.logging_config import get_logger
from application.dtos.payments import ChargeResult, RefundResult
from shared.codes.payment_codes import (
    PROVIDER_CHARGE_STATUS_TO_INTERNAL,
    PROVIDER_REFUND_STATUS_TO_INTERNAL,
)


logger = get_logger(__name__)

ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW"})


class BasePaymentClient:
    provider: str = "base"

    async def create_charge(
        self,
        amount: Decimal,
        currency: str,
        *,
        reference: str,
        idempotency_key: str | None = None,
    ) -> ChargeResult:
        raise NotImplementedError

    async def refund(self, charge_id: str, *, idempotency_key: str | None = None) -> RefundResult:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release provider resources; nothing to do by default."""
        return None

    # Helpers
    @staticmethod
    def _to_minor(amount: Decimal, currency: str) -> int:
        """Amount in the smallest currency unit (cents, or whole yen/won)."""
        exponent = 0 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 2
        return int((amount * (Decimal(10) ** exponent)).to_integral_value())

    def _map_status(self, provider_status: str) -> str:
        mapping = PROVIDER_CHARGE_STATUS_TO_INTERNAL.get(self.provider, {})
        return mapping.get(provider_status, provider_status)

    def _map_refund_status(self, provider_status: str) -> str:
        mapping = PROVIDER_REFUND_STATUS_TO_INTERNAL.get(self.provider, {})
        return mapping.get(provider_status, provider_status)

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
