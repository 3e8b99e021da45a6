"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.types import condecimal

from domain.payment.entity import Payment, PaymentMethod, PaymentStatus


class PaymentCreateDTO(BaseModel):
    amount: condecimal(gt=0, max_digits=15, decimal_places=2)  # type: ignore[valid-type]
    method: PaymentMethod
    service_id: uuid.UUID
    payment_date: Optional[datetime] = None


class PaymentStatusUpdateDTO(BaseModel):
    id: uuid.UUID
    status: PaymentStatus
    # optimistic-lock token from a previous read
    version: Optional[int] = Field(default=None, ge=1)


class PaymentDTO(BaseModel):
    id: uuid.UUID
    amount: Decimal
    payment_date: Optional[datetime] = None
    method: PaymentMethod
    status: PaymentStatus
    service_id: uuid.UUID
    version: int

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("amount")
    def _serialize_amount(self, amount: Decimal) -> str:
        return str(amount.quantize(Decimal("0.01")))

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentDTO":
        return cls.model_validate(payment)


class ChargeResult(BaseModel):
    charge_id: str
    status: str
    provider: str


class RefundResult(BaseModel):
    refund_id: str
    status: str
    provider: str
    charge_id: Optional[str] = None
