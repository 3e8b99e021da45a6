"""
Provider exceptions, both surfaced to callers as PaymentGatewayException.
"""
from __future__ import annotations

from typing import Optional

from domain.common.exceptions import PaymentGatewayException
from shared.codes.payment_codes import PaymentCode


class PaymentProviderError(PaymentGatewayException):
    def __init__(self, message: str, *, provider: str, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(
            message,
            provider=provider,
            code=PaymentCode.PROVIDER_ERROR,
            error_type="PaymentProviderError",
            provider_code=provider_code,
            details=details,
        )


class PaymentRecoverableError(PaymentGatewayException):
    """Transient failure (rate limit, network); the caller may try again later."""

    def __init__(self, message: str, *, provider: str, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(
            message,
            provider=provider,
            code=PaymentCode.PROVIDER_RECOVERABLE,
            error_type="PaymentRecoverableError",
            provider_code=provider_code,
            details=details,
        )
