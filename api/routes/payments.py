"""
Payments API routes.

Thin HTTP layer over PaymentApplicationService; role checks live in
dependencies, domain errors are mapped by the global handlers.
"""
from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, Query, Security, status

from api.dependencies import get_payment_service, require_roles
from application.dtos.auth import Principal, Role
from application.dtos.common import PaginationParams
from application.dtos.payments import PaymentCreateDTO, PaymentDTO, PaymentStatusUpdateDTO
from application.services.payment_service import PaymentApplicationService
from core.response import success_response, paginated_response, Response as ApiResponse, PaginatedData
from domain.common.exceptions import BusinessException
from domain.payment.entity import PaymentStatus
from shared.codes import BusinessCode


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get(
    "",
    summary="List payments",
    response_model=ApiResponse[PaginatedData[PaymentDTO]],
)
async def list_payments(
    _principal: Principal = Security(require_roles(Role.ADMIN, Role.RECEPTIONIST)),
    params: PaginationParams = Depends(),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status", description="Filter by status"),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    """Newest first, paginated (Admin, Receptionist)"""
    items, total = await service.list_payments(params.skip, params.limit, status_filter)
    return paginated_response(items=items, total=total, page=params.page, size=params.size)


@router.get("/{payment_id}", summary="Get payment", response_model=ApiResponse[PaymentDTO])
async def get_payment(
    payment_id: uuid.UUID,
    _principal: Principal = Security(require_roles(Role.ADMIN, Role.RECEPTIONIST, Role.MEMBER)),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    payment = await service.get_payment(payment_id)
    return success_response(data=payment)


@router.post(
    "",
    summary="Create payment",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[PaymentDTO],
)
async def create_payment(
    payload: PaymentCreateDTO,
    _principal: Principal = Security(require_roles(Role.ADMIN, Role.MEMBER)),
    service: PaymentApplicationService = Depends(get_payment_service),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=255),
):
    """
    Record a payment

    - **Cash**: stored as Pending
    - **Card**: charged through the gateway first and stored as Completed

    Send an `Idempotency-Key` header to make retries safe: a repeated key
    returns the payment recorded by the first request.
    """
    payment = await service.create_payment(payload, idempotency_key=idempotency_key)
    return success_response(data=payment, message="Payment created")


@router.put("/{payment_id}", summary="Update payment status", response_model=ApiResponse[PaymentDTO])
async def update_payment_status(
    payment_id: uuid.UUID,
    payload: PaymentStatusUpdateDTO,
    _principal: Principal = Security(require_roles(Role.ADMIN, Role.RECEPTIONIST)),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    """Move a payment along its lifecycle; `version` enables the optimistic check"""
    if payload.id != payment_id:
        raise BusinessException(
            code=BusinessCode.PARAM_ERROR,
            message="Payment id in path and body do not match",
            error_type="IdMismatch",
            field="id",
        )
    payment = await service.change_status(payment_id, payload.status, payload.version)
    return success_response(data=payment, message="Payment status updated")


@router.post("/{payment_id}/refund", summary="Refund payment", response_model=ApiResponse[PaymentDTO])
async def refund_payment(
    payment_id: uuid.UUID,
    _principal: Principal = Security(require_roles(Role.ADMIN, Role.RECEPTIONIST)),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    """Refund a Completed payment; card payments are refunded at the gateway"""
    payment = await service.refund_payment(payment_id)
    return success_response(data=payment, message="Payment refunded")


@router.delete("/{payment_id}", summary="Delete payment", response_model=ApiResponse[Any])
async def delete_payment(
    payment_id: uuid.UUID,
    _principal: Principal = Security(require_roles(Role.ADMIN)),
    service: PaymentApplicationService = Depends(get_payment_service),
):
    await service.delete_payment(payment_id)
    return success_response(data=None, message="Payment deleted")
