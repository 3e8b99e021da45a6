"""
Payment repository implementation backed by SQLAlchemy
"""
import uuid
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from domain.common.exceptions import ConcurrentPaymentUpdateException
from domain.payment.entity import Payment, PaymentMethod, PaymentStatus
from domain.payment.repository import PaymentRepository
from infrastructure.models.payment import PaymentModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyPaymentRepository(PaymentRepository):
    """SQLAlchemy implementation of PaymentRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            amount=Decimal(str(model.amount)),
            method=PaymentMethod(model.method),
            status=PaymentStatus(model.status),
            service_id=model.service_id,
            payment_date=model.payment_date,
            external_reference=model.external_reference,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Payment) -> PaymentModel:
        # version is assigned by the mapper on INSERT
        return PaymentModel(
            id=entity.id,
            amount=entity.amount,
            payment_date=entity.payment_date,
            method=entity.method.value,
            status=entity.status.value,
            service_id=entity.service_id,
            external_reference=entity.external_reference,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def _get_model(self, payment_id: uuid.UUID) -> Optional[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.id == payment_id)
        )
        return result.scalar_one_or_none()

    async def create(self, payment: Payment) -> Payment:
        db_payment = self._to_model(payment)
        self.session.add(db_payment)
        await self.session.flush()
        await self.session.refresh(db_payment)
        logger.info(
            "payment_created",
            payment_id=str(db_payment.id),
            method=db_payment.method,
            status=db_payment.status,
        )
        return self._to_entity(db_payment)

    async def get_by_id(self, payment_id: uuid.UUID) -> Optional[Payment]:
        db_payment = await self._get_model(payment_id)
        return self._to_entity(db_payment) if db_payment else None

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None
    ) -> List[Payment]:
        query = select(PaymentModel)

        if status:
            query = query.where(PaymentModel.status == status.value)

        query = query.order_by(PaymentModel.created_at.desc()).offset(skip).limit(limit)

        result = await self.session.execute(query)
        return [self._to_entity(p) for p in result.scalars().all()]

    async def count(self, status: Optional[PaymentStatus] = None) -> int:
        query = select(func.count(PaymentModel.id))
        if status:
            query = query.where(PaymentModel.status == status.value)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def update(self, payment: Payment) -> Payment:
        db_payment = await self._get_model(payment.id)

        if not db_payment:
            raise ValueError(f"Payment with id {payment.id} not found")

        if db_payment.version != payment.version:
            logger.warning(
                "payment_version_conflict",
                payment_id=str(payment.id),
                expected_version=payment.version,
                actual_version=db_payment.version,
            )
            raise ConcurrentPaymentUpdateException(
                str(payment.id),
                expected_version=payment.version,
                actual_version=db_payment.version,
            )

        # amount, method, service_id and external_reference are immutable
        db_payment.status = payment.status.value
        db_payment.updated_at = payment.updated_at

        try:
            await self.session.flush()
        except StaleDataError as e:
            # another transaction bumped the version between our read and flush
            logger.warning("payment_stale_update", payment_id=str(payment.id))
            raise ConcurrentPaymentUpdateException(
                str(payment.id), expected_version=payment.version
            ) from e
        await self.session.refresh(db_payment)

        logger.info(
            "payment_updated",
            payment_id=str(db_payment.id),
            status=db_payment.status,
            version=db_payment.version,
        )

        return self._to_entity(db_payment)

    async def delete(self, payment_id: uuid.UUID) -> bool:
        db_payment = await self._get_model(payment_id)

        if not db_payment:
            return False

        await self.session.delete(db_payment)
        await self.session.flush()

        logger.info("payment_deleted", payment_id=str(payment_id))
        return True
