"""Business exceptions shared by the domain and infrastructure layers.

The core layer only maps these to HTTP responses; the domain never imports core.
"""
from __future__ import annotations

from typing import Optional

from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """Base class for business exceptions."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class PaymentNotFoundException(BusinessException):
    def __init__(self, payment_id: Optional[str] = None):
        details = {"payment_id": payment_id} if payment_id else None
        super().__init__(
            code=BusinessCode.NOT_FOUND,
            message="Payment not found",
            error_type="PaymentNotFound",
            details=details,
        )


class InvalidPaymentTransitionException(BusinessException):
    def __init__(self, current: str, target: str, *, payment_id: Optional[str] = None):
        details = {"current": current, "target": target}
        if payment_id:
            details["payment_id"] = payment_id
        super().__init__(
            code=BusinessCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change payment status from {current} to {target}",
            error_type="InvalidPaymentTransition",
            details=details,
            field="status",
        )


class ConcurrentPaymentUpdateException(BusinessException):
    def __init__(
        self,
        payment_id: str,
        *,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        details: dict = {"payment_id": payment_id}
        if expected_version is not None:
            details["expected_version"] = expected_version
        if actual_version is not None:
            details["actual_version"] = actual_version
        super().__init__(
            code=BusinessCode.CONCURRENT_MODIFICATION,
            message="Payment was modified by another request",
            error_type="ConcurrentPaymentUpdate",
            details=details,
            field="version",
        )


class PaymentGatewayException(BusinessException):
    """Charge or refund failed at the external gateway."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        code: int = PaymentCode.PROVIDER_ERROR,
        error_type: str = "PaymentGatewayError",
        provider_code: str | None = None,
        details: Optional[dict] = None,
    ):
        full_details = {"provider": provider, "provider_code": provider_code}
        if details:
            full_details.update(details)
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=full_details,
        )
