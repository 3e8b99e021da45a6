"""
Payment domain events.

Dataclass events record payment lifecycle facts for downstream handling
(logging, messaging). Domain remains free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class PaymentEvent:
    payment_id: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class PaymentCreated(PaymentEvent):
    method: str = ""
    status: str = ""
    amount: str = ""


@dataclass
class PaymentStatusChanged(PaymentEvent):
    previous: str = ""
    current: str = ""


@dataclass
class PaymentRefunded(PaymentEvent):
    external_reference: Optional[str] = None


@dataclass
class PaymentDeleted(PaymentEvent):
    pass
