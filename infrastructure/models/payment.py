"""
Payment ORM model - SQLAlchemy table mapping
This is an infrastructure detail, not the domain model
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Index, Uuid, CheckConstraint

from .base import Base


class PaymentModel(Base):
    """
    Payment table mapping

    Carries no business rules; those live in domain.payment.entity.Payment.
    `version` is the optimistic-lock column: every UPDATE is issued as
    ``WHERE id = :id AND version = :old`` and bumps it.
    """
    __tablename__ = "payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    amount = Column(Numeric(precision=15, scale=2), nullable=False, comment="Payment amount")
    payment_date = Column(DateTime(timezone=True), nullable=False, comment="When the payment was made")
    method = Column(String(20), nullable=False, comment="Payment method: Cash/Card")
    status = Column(
        String(20),
        nullable=False,
        default="Pending",
        index=True,
        comment="Payment status: Pending/Completed/Failed/Refunded"
    )
    service_id = Column(Uuid(as_uuid=True), nullable=False, index=True, comment="Catalog service reference")
    external_reference = Column(String(200), nullable=True, comment="Gateway charge id (card only)")

    version = Column(Integer, nullable=False, comment="Optimistic lock version")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Created at"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Updated at"
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_payments_created_at", "created_at"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    def __repr__(self):
        return (
            f"<PaymentModel(id={self.id}, amount={self.amount}, "
            f"method='{self.method}', status='{self.status}', version={self.version})>"
        )
