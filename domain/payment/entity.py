"""
Payment domain entity - the payment aggregate root
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from domain.common.exceptions import (
    DomainValidationException,
    InvalidPaymentTransitionException,
)


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CARD = "Card"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


# Directed edges of the payment lifecycle; Failed and Refunded are terminal.
ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


def is_transition_allowed(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_positive_amount(amount) -> Decimal:
    """Coerce to Decimal and reject non-positive amounts."""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise DomainValidationException(f"Invalid payment amount: {amount}", field="amount")
    if not value.is_finite() or value <= 0:
        raise DomainValidationException(
            f"Payment amount must be greater than 0: {amount}",
            field="amount",
        )
    return value


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Payment:
    """
    Payment aggregate root

    Business rules:
    1. amount must be greater than 0
    2. status only moves along ALLOWED_TRANSITIONS
    3. external_reference is only set for card payments and never changes afterwards
    4. only completed payments can be refunded
    """

    id: uuid.UUID
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    service_id: uuid.UUID
    payment_date: Optional[datetime] = None
    external_reference: Optional[str] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.amount = ensure_positive_amount(self.amount)
        self.method = PaymentMethod(self.method)
        self.status = PaymentStatus(self.status)
        if self.external_reference and self.method != PaymentMethod.CARD:
            raise DomainValidationException(
                "Only card payments carry an external reference",
                field="external_reference",
            )
        self.payment_date = _ensure_utc(self.payment_date)
        self.created_at = _ensure_utc(self.created_at)
        self.updated_at = _ensure_utc(self.updated_at)

    @classmethod
    def open(
        cls,
        *,
        amount: Decimal,
        method: PaymentMethod,
        service_id: uuid.UUID,
        payment_date: Optional[datetime] = None,
        external_reference: Optional[str] = None,
        payment_id: Optional[uuid.UUID] = None,
    ) -> "Payment":
        """Build a new payment: captured card payments start Completed, everything else Pending."""
        method = PaymentMethod(method)
        if method == PaymentMethod.CARD and external_reference:
            status = PaymentStatus.COMPLETED
        else:
            status = PaymentStatus.PENDING
        now = datetime.now(timezone.utc)
        return cls(
            id=payment_id or uuid.uuid4(),
            amount=amount,
            method=method,
            status=status,
            service_id=service_id,
            payment_date=payment_date or now,
            external_reference=external_reference,
            created_at=now,
            updated_at=now,
        )

    def can_transition_to(self, target: PaymentStatus) -> bool:
        return is_transition_allowed(self.status, PaymentStatus(target))

    def transition_to(self, target: PaymentStatus) -> PaymentStatus:
        """Apply a status change and return the previous status."""
        target = PaymentStatus(target)
        if not self.can_transition_to(target):
            raise InvalidPaymentTransitionException(
                self.status.value, target.value, payment_id=str(self.id)
            )
        previous = self.status
        self.status = target
        self.updated_at = datetime.now(timezone.utc)
        return previous

    def can_refund(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def requires_gateway_refund(self) -> bool:
        return self.method == PaymentMethod.CARD and bool(self.external_reference)

    def mark_refunded(self) -> None:
        if not self.can_refund():
            raise InvalidPaymentTransitionException(
                self.status.value, PaymentStatus.REFUNDED.value, payment_id=str(self.id)
            )
        self.transition_to(PaymentStatus.REFUNDED)

    def is_final_status(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]
