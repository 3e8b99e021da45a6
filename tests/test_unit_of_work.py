import uuid
from decimal import Decimal

import pytest

from domain.payment.entity import Payment, PaymentMethod


pytestmark = pytest.mark.asyncio


def _cash() -> Payment:
    return Payment.open(amount=Decimal("15.00"), method=PaymentMethod.CASH, service_id=uuid.uuid4())


async def test_clean_exit_commits(uow_factory):
    async with uow_factory() as uow:
        created = await uow.payment_repository.create(_cash())

    async with uow_factory(readonly=True) as uow:
        assert await uow.payment_repository.get_by_id(created.id) is not None


async def test_error_rolls_back_and_propagates(uow_factory):
    payment = _cash()
    with pytest.raises(RuntimeError):
        async with uow_factory() as uow:
            await uow.payment_repository.create(payment)
            raise RuntimeError("boom")

    async with uow_factory(readonly=True) as uow:
        assert await uow.payment_repository.get_by_id(payment.id) is None


async def test_explicit_rollback_discards_writes(uow_factory):
    payment = _cash()
    async with uow_factory() as uow:
        await uow.payment_repository.create(payment)
        await uow.rollback()

    async with uow_factory(readonly=True) as uow:
        assert await uow.payment_repository.get_by_id(payment.id) is None


async def test_owned_session_is_closed_on_exit(uow_factory):
    uow = uow_factory()
    async with uow:
        assert uow.session is not None
    assert uow.session is None
    assert uow.payment_repository is None
