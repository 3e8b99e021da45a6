"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_RECOVERABLE = 60001


# Provider charge status -> internal PaymentStatus value
PROVIDER_CHARGE_STATUS_TO_INTERNAL = {
    "stripe": {
        # PaymentIntent.status
        "requires_payment_method": "Pending",
        "requires_confirmation": "Pending",
        "requires_action": "Pending",
        "processing": "Pending",
        "requires_capture": "Pending",
        "succeeded": "Completed",
        "canceled": "Failed",
    },
    "sandbox": {
        "captured": "Completed",
    },
}

# Provider refund status -> internal PaymentStatus value
PROVIDER_REFUND_STATUS_TO_INTERNAL = {
    "stripe": {
        # Refund.status
        "pending": "Pending",
        "requires_action": "Pending",
        "succeeded": "Refunded",
        "failed": "Failed",
        "canceled": "Failed",
    },
    "sandbox": {
        "refunded": "Refunded",
    },
}
