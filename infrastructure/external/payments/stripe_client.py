"""
Stripe adapter using the official stripe-python SDK.

Charges are PaymentIntents restricted to cards; refunds target the
PaymentIntent id stored as the payment's external reference. Idempotency
keys are passed through the `idempotency_key` kwarg. The SDK is
synchronous, so calls run in a worker thread.
"""
from __future__ import annotations

import asyncio
from decimal import Decimal

import stripe

from application.dtos.payments import ChargeResult, RefundResult
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentProviderError,
    PaymentRecoverableError,
)
from core.settings import payment_settings


class StripeClient(BasePaymentClient):
    provider = "stripe"

    def __init__(self, secret_key: str | None = None):
        key = secret_key or payment_settings.stripe.secret_key
        if not key:
            raise RuntimeError("PAYMENT__STRIPE__SECRET_KEY not configured")
        stripe.api_key = key
        # no retries: a failed call surfaces immediately
        stripe.max_network_retries = 0

    def _wrap(self, exc: Exception) -> Exception:
        provider_code = getattr(exc, "code", None)
        if isinstance(exc, (stripe.RateLimitError, stripe.APIConnectionError)):
            return PaymentRecoverableError(str(exc), provider=self.provider, provider_code=provider_code)
        return PaymentProviderError(str(exc), provider=self.provider, provider_code=provider_code)

    async def create_charge(
        self,
        amount: Decimal,
        currency: str,
        *,
        reference: str,
        idempotency_key: str | None = None,
    ) -> ChargeResult:
        amount_minor = self._to_minor(amount, currency)
        try:
            pi = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount_minor,
                currency=currency.lower(),
                payment_method_types=["card"],
                metadata={"payment_id": reference},
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            raise self._wrap(exc) from exc

        self._log("stripe_payment_intent_created", intent_id=pi["id"], status=pi["status"])
        return ChargeResult(
            charge_id=str(pi["id"]),
            status=self._map_status(str(pi["status"])),
            provider=self.provider,
        )

    async def refund(self, charge_id: str, *, idempotency_key: str | None = None) -> RefundResult:
        try:
            refund = await asyncio.to_thread(
                stripe.Refund.create,
                payment_intent=charge_id,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            raise self._wrap(exc) from exc

        self._log("stripe_refund_created", refund_id=refund["id"], charge_id=charge_id)
        return RefundResult(
            refund_id=str(refund["id"]),
            status=self._map_refund_status(str(refund.get("status") or "")),
            provider=self.provider,
            charge_id=charge_id,
        )
