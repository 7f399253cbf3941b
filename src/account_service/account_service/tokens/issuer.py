"""Bearer tokens handed out on login."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import (
    DEFAULT_JWT_AUDIENCE,
    DEFAULT_JWT_EXPIRATION_SECONDS,
    DEFAULT_JWT_ISSUER,
    TOKEN_PREFIX,
)
from ..core.exceptions import AuthenticationError
from ..users.model import User

ALGORITHM = "HS512"


class JwtTokenIssuer:
    def __init__(
        self,
        secret: str,
        *,
        issuer: str = DEFAULT_JWT_ISSUER,
        audience: str = DEFAULT_JWT_AUDIENCE,
        expiration_seconds: int = DEFAULT_JWT_EXPIRATION_SECONDS,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._ttl = timedelta(seconds=int(expiration_seconds))

    def issue(self, user: User) -> str:
        """Encode the user's name and authorities as a signed JWT."""
        now = datetime.now(timezone.utc)
        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": user.username,
            "iat": now,
            "exp": now + self._ttl,
            "role": user.role.value if user.role else None,
            "authorities": list(user.authorities),
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict:
        """Validate a token and return its claims."""
        if token and token.startswith(TOKEN_PREFIX):
            token = token[len(TOKEN_PREFIX):]
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Token cannot be verified") from e
