from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object, no database access. ``otp`` holds the single pending
    one-time password, or ``None`` when nothing awaits verification.
    """

    user_id: Optional[int]
    username: str
    password_hash: str
    role: Optional[Role] = None
    authorities: tuple[str, ...] = ()
    otp: Optional[str] = None
    is_locked: bool = True
    is_active: bool = True
    join_date: Optional[datetime] = None
    last_login_date: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "role": self.role.value if self.role else None,
            "authorities": list(self.authorities),
            "locked": self.is_locked,
            "active": self.is_active,
            "joinDate": self.join_date.isoformat() if self.join_date else None,
            "lastLoginDate": self.last_login_date.isoformat() if self.last_login_date else None,
        }
