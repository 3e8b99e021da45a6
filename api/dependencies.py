"""
API dependencies - authentication, authorization and service wiring
"""
from typing import AsyncIterator, Callable, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from application.dtos.auth import Principal, Role
from application.ports.payment_gateway import PaymentGateway
from application.services.payment_service import PaymentApplicationService
from application.services.token_service import TokenService
from domain.common.unit_of_work import AbstractUnitOfWork
from core.settings import payment_settings
from infrastructure.external.payments import get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

# Tokens are issued by the Auth service; we only accept Bearer headers
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token issued by the Auth service",
    auto_error=False,
)


async def get_token(
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> str:
    """Extract the raw token from the Authorization header"""
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_service() -> TokenService:
    return TokenService()


async def get_current_principal(
    token: str = Depends(get_token),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    principal = tokens.decode_access_token(token)
    structlog.contextvars.bind_contextvars(user=principal.subject)
    return principal


def require_roles(*roles: Role):
    """Dependency factory: the caller must hold at least one of `roles`."""

    async def _checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_any_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return principal

    return _checker


def get_uow_factory() -> Callable[..., AbstractUnitOfWork]:
    return SQLAlchemyUnitOfWork


def get_gateway_factory() -> Callable[[], PaymentGateway]:
    """Gateways are built lazily by the service, only for card charges and refunds."""
    return get_payment_gateway


async def get_payment_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway_factory: Callable[[], PaymentGateway] = Depends(get_gateway_factory),
) -> AsyncIterator[PaymentApplicationService]:
    service = PaymentApplicationService(
        uow_factory=uow_factory,
        gateway_factory=gateway_factory,
        currency=payment_settings.currency,
    )
    try:
        yield service
    finally:
        await service.aclose()
