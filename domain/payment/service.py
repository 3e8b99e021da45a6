"""
Payment domain service - payment lifecycle rules over the repository
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from .entity import Payment, PaymentMethod, PaymentStatus
from .events import (
    PaymentEvent,
    PaymentCreated,
    PaymentStatusChanged,
    PaymentRefunded,
    PaymentDeleted,
)
from .repository import PaymentRepository
from domain.common.exceptions import (
    ConcurrentPaymentUpdateException,
    InvalidPaymentTransitionException,
    PaymentNotFoundException,
)


class PaymentDomainService:
    """
    Payment domain service

    Responsibilities:
    1. building and persisting new payments
    2. guarding status transitions and refunds
    3. collecting domain events
    """

    def __init__(self, payment_repository: PaymentRepository):
        self.payment_repository = payment_repository
        self.events: List[PaymentEvent] = []

    async def get_payment(self, payment_id: uuid.UUID) -> Payment:
        payment = await self.payment_repository.get_by_id(payment_id)
        if not payment:
            raise PaymentNotFoundException(str(payment_id))
        return payment

    async def list_payments(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
    ) -> Tuple[List[Payment], int]:
        items = await self.payment_repository.list(skip=skip, limit=limit, status=status)
        total = await self.payment_repository.count(status=status)
        return items, total

    async def register_payment(
        self,
        amount: Decimal,
        method: PaymentMethod,
        service_id: uuid.UUID,
        payment_date: Optional[datetime] = None,
        external_reference: Optional[str] = None,
        payment_id: Optional[uuid.UUID] = None,
    ) -> Payment:
        """
        Create a payment record.

        Card payments with a captured charge start Completed, all others Pending.
        """
        payment = Payment.open(
            amount=amount,
            method=method,
            service_id=service_id,
            payment_date=payment_date,
            external_reference=external_reference,
            payment_id=payment_id,
        )
        created = await self.payment_repository.create(payment)

        self.events.append(PaymentCreated(
            payment_id=str(created.id),
            method=created.method.value,
            status=created.status.value,
            amount=str(created.amount),
        ))
        return created

    async def change_status(
        self,
        payment_id: uuid.UUID,
        target: PaymentStatus,
        expected_version: Optional[int] = None,
    ) -> Payment:
        """
        Move a payment along an allowed edge.

        Business rules:
        1. payment must exist
        2. (current, target) must be in ALLOWED_TRANSITIONS
        3. when expected_version is given it must match the stored version
        """
        payment = await self.get_payment(payment_id)
        if expected_version is not None and expected_version != payment.version:
            raise ConcurrentPaymentUpdateException(
                str(payment_id),
                expected_version=expected_version,
                actual_version=payment.version,
            )

        previous = payment.transition_to(target)
        updated = await self.payment_repository.update(payment)

        self.events.append(PaymentStatusChanged(
            payment_id=str(updated.id),
            previous=previous.value,
            current=updated.status.value,
        ))
        return updated

    async def get_refundable_payment(self, payment_id: uuid.UUID) -> Payment:
        """Load a payment and make sure it can be refunded."""
        payment = await self.get_payment(payment_id)
        if not payment.can_refund():
            raise InvalidPaymentTransitionException(
                payment.status.value,
                PaymentStatus.REFUNDED.value,
                payment_id=str(payment.id),
            )
        return payment

    async def complete_refund(self, payment: Payment) -> Payment:
        payment.mark_refunded()
        updated = await self.payment_repository.update(payment)

        self.events.append(PaymentRefunded(
            payment_id=str(updated.id),
            external_reference=updated.external_reference,
        ))
        return updated

    async def delete_payment(self, payment_id: uuid.UUID) -> None:
        """Administrative delete; bypasses the lifecycle rules."""
        deleted = await self.payment_repository.delete(payment_id)
        if not deleted:
            raise PaymentNotFoundException(str(payment_id))
        self.events.append(PaymentDeleted(payment_id=str(payment_id)))

    def clear_events(self) -> List[PaymentEvent]:
        events = self.events.copy()
        self.events.clear()
        return events
