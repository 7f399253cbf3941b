"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from types import MappingProxyType

from .enums import Role

JWT_TOKEN_HEADER = "Jwt-Token"
TOKEN_PREFIX = "Bearer "
DEFAULT_JWT_ISSUER = "account-service"
DEFAULT_JWT_AUDIENCE = "account-service-users"
DEFAULT_JWT_EXPIRATION_SECONDS = 5 * 24 * 60 * 60

OTP_LENGTH = 10

DEFAULT_MAX_LOGIN_ATTEMPTS = 5
DEFAULT_LOGIN_ATTEMPT_WINDOW_SECONDS = 15 * 60

PASSWORD_POLICY_PATTERN = r".*[^a-zA-Z0-9].*"

OTP_SENT_MESSAGE = "An OTP has been sent to your registered email address."

DEFAULT_ROLE_AUTHORITIES = MappingProxyType(
    {
        Role.EMPLOYEE: ("user:read", "user:update", "report:read", "report:create"),
        Role.STUDENT: ("user:read", "report:read"),
        Role.GUEST: ("user:read",),
    }
)
