from __future__ import annotations

import re

from ..core.constants import PASSWORD_POLICY_PATTERN
from ..core.exceptions import PasswordPolicyError, ValidationError

_PASSWORD_POLICY = re.compile(PASSWORD_POLICY_PATTERN, re.DOTALL)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_password_policy(password: str) -> str:
    """Password must contain at least one non-alphanumeric character."""
    if not password or not _PASSWORD_POLICY.fullmatch(password):
        raise PasswordPolicyError(
            "Please create a stronger password. Password should contain special characters."
        )
    return password
