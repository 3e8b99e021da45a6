"""
Token service - verifies access JWTs issued by the Auth service
"""
from typing import Any, Iterable, Optional

import jwt

from application.dtos.auth import Principal
from core.config import settings
from core.exceptions import UnauthorizedException, TokenExpiredException
from core.logging_config import get_logger


logger = get_logger(__name__)

# Role claim names emitted by the .NET Auth service and by common JWT issuers
ROLE_CLAIMS = (
    "role",
    "roles",
    "http://schemas.microsoft.com/ws/2008/06/identity/claims/role",
)
USERNAME_CLAIMS = (
    "unique_name",
    "username",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name",
)


def _collect_roles(payload: dict[str, Any]) -> set[str]:
    roles: set[str] = set()
    for claim in ROLE_CLAIMS:
        value = payload.get(claim)
        if value is None:
            continue
        if isinstance(value, str):
            roles.add(value)
        elif isinstance(value, Iterable):
            roles.update(str(v) for v in value)
    return roles


class TokenService:
    """Stateless JWT verification."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ) -> None:
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM
        self.issuer = issuer if issuer is not None else settings.JWT_ISSUER
        self.audience = audience if audience is not None else settings.JWT_AUDIENCE

    def decode_access_token(self, token: str) -> Principal:
        """
        Verify signature, expiry and (when configured) issuer/audience.

        Expired token -> TokenExpiredException; anything else invalid -> UnauthorizedException.
        """
        options = {"verify_aud": bool(self.audience), "require": ["sub", "exp"]}
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                issuer=self.issuer or None,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.InvalidTokenError as e:
            logger.warning("invalid_access_token", error=str(e))
            raise UnauthorizedException("Invalid access token")

        username = next((payload[c] for c in USERNAME_CLAIMS if payload.get(c)), None)
        return Principal(
            subject=str(payload["sub"]),
            username=username,
            roles=_collect_roles(payload),
        )
