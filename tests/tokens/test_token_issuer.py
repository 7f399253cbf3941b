from __future__ import annotations

import pytest

from account_service.core.enums import Role
from account_service.core.exceptions import AuthenticationError
from account_service.tokens.issuer import JwtTokenIssuer
from account_service.users.model import User

SECRET = "token-test-secret-0123456789abcdef-token-test-secret-0123456789abcdef"


def _user() -> User:
    return User(
        user_id=7,
        username="alice",
        password_hash="x",
        role=Role.STUDENT,
        authorities=("user:read", "report:read"),
        is_locked=False,
    )


def test_issue_and_decode_round_trip():
    issuer = JwtTokenIssuer(SECRET)

    claims = issuer.decode(issuer.issue(_user()))

    assert claims["sub"] == "alice"
    assert claims["role"] == "ROLE_STUDENT"
    assert claims["authorities"] == ["user:read", "report:read"]


def test_decode_accepts_bearer_prefix():
    issuer = JwtTokenIssuer(SECRET)

    assert issuer.decode("Bearer " + issuer.issue(_user()))["sub"] == "alice"


def test_decode_rejects_token_signed_with_other_secret():
    token = JwtTokenIssuer(SECRET + "-other").issue(_user())

    with pytest.raises(AuthenticationError):
        JwtTokenIssuer(SECRET).decode(token)


def test_decode_rejects_expired_token():
    issuer = JwtTokenIssuer(SECRET, expiration_seconds=-10)

    with pytest.raises(AuthenticationError, match="expired"):
        issuer.decode(issuer.issue(_user()))


def test_decode_rejects_garbage():
    with pytest.raises(AuthenticationError):
        JwtTokenIssuer(SECRET).decode("not-a-token")


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        JwtTokenIssuer("")
