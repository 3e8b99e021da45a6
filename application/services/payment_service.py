"""
Application service orchestrating the payment lifecycle.

This class depends only on the unit-of-work abstraction, the application
PaymentGateway port and DTOs. Gateway implementations are provided by
infrastructure and injected from the composition root (API) as a factory,
so only card charges and card refunds ever build a gateway client.
"""
from __future__ import annotations

import hashlib
import uuid
from typing import Callable, List, Optional, Tuple

from application.dtos.payments import PaymentCreateDTO, PaymentDTO
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from domain.common.exceptions import PaymentGatewayException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.entity import PaymentMethod, PaymentStatus, ensure_positive_amount
from domain.payment.events import PaymentEvent
from domain.payment.service import PaymentDomainService


logger = get_logger(__name__)

# payment ids derived from a client Idempotency-Key live in this namespace
_IDEMPOTENT_PAYMENT_NAMESPACE = uuid.UUID("7f0c6a52-3a4e-4d8e-9b1f-2c5d8e6a9b10")


def _idempotency_key(*parts: object) -> str:
    # Stable, reproducible key derived from business identifiers (no timestamp)
    base = "|".join(str(p) for p in parts)
    return hashlib.sha256(base.encode("utf-8")).hexdigest()


class PaymentApplicationService:
    """Payment lifecycle use-cases: create, read, transition, refund, delete."""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway_factory: Callable[[], PaymentGateway],
        *,
        currency: str = "USD",
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway_factory = gateway_factory
        self._gateway: Optional[PaymentGateway] = None
        self.currency = currency.upper()

    @property
    def gateway(self) -> PaymentGateway:
        """Gateway client, built on first use."""
        if self._gateway is None:
            self._gateway = self._gateway_factory()
        return self._gateway

    async def create_payment(
        self,
        req: PaymentCreateDTO,
        idempotency_key: Optional[str] = None,
    ) -> PaymentDTO:
        """
        Record a payment; card payments are captured before anything is stored.

        With an `idempotency_key` the payment id is derived from it, so a
        retried request returns the stored payment and reuses the same gateway
        key instead of charging twice.
        """
        amount = ensure_positive_amount(req.amount)

        if idempotency_key:
            payment_id = uuid.uuid5(_IDEMPOTENT_PAYMENT_NAMESPACE, idempotency_key)
            async with self._uow_factory(readonly=True) as uow:
                existing = await uow.payment_repository.get_by_id(payment_id)
            if existing is not None:
                logger.info("payment_create_replayed", payment_id=str(payment_id))
                return PaymentDTO.from_entity(existing)
        else:
            payment_id = uuid.uuid4()

        external_reference: Optional[str] = None
        if req.method == PaymentMethod.CARD:
            external_reference = await self._capture(payment_id, amount)

        async with self._uow_factory() as uow:
            domain_service = PaymentDomainService(uow.payment_repository)
            payment = await domain_service.register_payment(
                amount=amount,
                method=req.method,
                service_id=req.service_id,
                payment_date=req.payment_date,
                external_reference=external_reference,
                payment_id=payment_id,
            )
            events = domain_service.clear_events()

        self._publish(events)
        return PaymentDTO.from_entity(payment)

    async def _capture(self, payment_id: uuid.UUID, amount) -> str:
        gateway = self.gateway
        key = _idempotency_key("charge", payment_id, amount, self.currency)
        logger.info(
            "payment_charge_request",
            payment_id=str(payment_id),
            provider=gateway.provider,
            idempotency_key=key,
        )
        charge = await gateway.create_charge(
            amount,
            self.currency,
            reference=str(payment_id),
            idempotency_key=key,
        )
        if not charge.charge_id:
            raise PaymentGatewayException(
                "Gateway returned no charge id",
                provider=gateway.provider,
                details={"payment_id": str(payment_id)},
            )
        logger.info(
            "payment_charge_response",
            payment_id=str(payment_id),
            provider=charge.provider,
            status=charge.status,
        )
        return charge.charge_id

    async def get_payment(self, payment_id: uuid.UUID) -> PaymentDTO:
        async with self._uow_factory(readonly=True) as uow:
            payment = await PaymentDomainService(uow.payment_repository).get_payment(payment_id)
            return PaymentDTO.from_entity(payment)

    async def list_payments(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PaymentStatus] = None,
    ) -> Tuple[List[PaymentDTO], int]:
        async with self._uow_factory(readonly=True) as uow:
            items, total = await PaymentDomainService(uow.payment_repository).list_payments(
                skip=skip, limit=limit, status=status
            )
            return [PaymentDTO.from_entity(p) for p in items], total

    async def change_status(
        self,
        payment_id: uuid.UUID,
        target: PaymentStatus,
        expected_version: Optional[int] = None,
    ) -> PaymentDTO:
        async with self._uow_factory() as uow:
            domain_service = PaymentDomainService(uow.payment_repository)
            payment = await domain_service.change_status(payment_id, target, expected_version)
            events = domain_service.clear_events()

        self._publish(events)
        return PaymentDTO.from_entity(payment)

    async def refund_payment(self, payment_id: uuid.UUID) -> PaymentDTO:
        async with self._uow_factory() as uow:
            domain_service = PaymentDomainService(uow.payment_repository)
            payment = await domain_service.get_refundable_payment(payment_id)

            if payment.requires_gateway_refund():
                # Result is only logged; a raised error aborts the refund
                result = await self.gateway.refund(
                    payment.external_reference,
                    idempotency_key=_idempotency_key("refund", payment.external_reference),
                )
                logger.info(
                    "payment_refund_gateway_called",
                    payment_id=str(payment_id),
                    provider=result.provider,
                    refund_id=result.refund_id,
                    status=result.status,
                )

            payment = await domain_service.complete_refund(payment)
            events = domain_service.clear_events()

        self._publish(events)
        return PaymentDTO.from_entity(payment)

    async def delete_payment(self, payment_id: uuid.UUID) -> None:
        async with self._uow_factory() as uow:
            domain_service = PaymentDomainService(uow.payment_repository)
            await domain_service.delete_payment(payment_id)
            events = domain_service.clear_events()

        self._publish(events)

    def _publish(self, events: List[PaymentEvent]) -> None:
        for event in events:
            logger.info(
                "payment_event",
                event_name=event.name,
                event_id=event.event_id,
                payment_id=event.payment_id,
            )

    async def aclose(self) -> None:
        # only a gateway that was actually built needs closing
        if self._gateway is None:
            return
        close = getattr(self._gateway, "aclose", None)
        if callable(close):
            await close()
        self._gateway = None
