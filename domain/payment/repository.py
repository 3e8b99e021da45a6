"""
Payment repository interface - abstract data access for payments
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Payment, PaymentStatus


class PaymentRepository(ABC):
    """Declares what can be done with payments, not how."""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: uuid.UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None
    ) -> List[Payment]:
        """Newest first"""
        pass

    @abstractmethod
    async def count(self, status: Optional[PaymentStatus] = None) -> int:
        pass

    @abstractmethod
    async def update(self, payment: Payment) -> Payment:
        """
        Persist mutable fields of an existing payment.

        Raises ConcurrentPaymentUpdateException when payment.version no
        longer matches the stored row.
        """
        pass

    @abstractmethod
    async def delete(self, payment_id: uuid.UUID) -> bool:
        """Hard delete; returns False when nothing was removed."""
        pass
