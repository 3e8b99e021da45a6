import time

import jwt
import pytest

from application.services.token_service import TokenService
from core.exceptions import TokenExpiredException, UnauthorizedException


SECRET = "test-secret-key"


def _encode(payload: dict, secret: str = SECRET) -> str:
    base = {"sub": "42", "exp": int(time.time()) + 60}
    base.update(payload)
    return jwt.encode(base, secret, algorithm="HS256")


def test_reads_roles_from_dotnet_claim():
    token = _encode({
        "http://schemas.microsoft.com/ws/2008/06/identity/claims/role": ["Admin", "Receptionist"],
        "unique_name": "frontdesk",
    })
    principal = TokenService(secret_key=SECRET).decode_access_token(token)

    assert principal.subject == "42"
    assert principal.username == "frontdesk"
    assert principal.roles == {"Admin", "Receptionist"}


def test_single_role_string():
    principal = TokenService(secret_key=SECRET).decode_access_token(_encode({"role": "Member"}))
    assert principal.roles == {"Member"}
    assert principal.has_any_role("Admin", "Member")
    assert not principal.has_any_role("Admin")


def test_expired_token():
    token = _encode({"exp": int(time.time()) - 10})
    with pytest.raises(TokenExpiredException):
        TokenService(secret_key=SECRET).decode_access_token(token)


def test_wrong_signature():
    token = _encode({"role": "Admin"}, secret="other-secret")
    with pytest.raises(UnauthorizedException):
        TokenService(secret_key=SECRET).decode_access_token(token)


def test_missing_subject_is_rejected():
    token = jwt.encode({"exp": int(time.time()) + 60}, SECRET, algorithm="HS256")
    with pytest.raises(UnauthorizedException):
        TokenService(secret_key=SECRET).decode_access_token(token)


def test_audience_checked_when_configured():
    token = _encode({"aud": "gym-api"})
    principal = TokenService(secret_key=SECRET, audience="gym-api").decode_access_token(token)
    assert principal.subject == "42"

    with pytest.raises(UnauthorizedException):
        TokenService(secret_key=SECRET, audience="other-api").decode_access_token(token)
