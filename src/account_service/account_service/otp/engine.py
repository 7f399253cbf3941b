from __future__ import annotations

import hmac
import logging
import secrets
import string
from dataclasses import replace
from typing import Optional

from ..core.constants import OTP_LENGTH
from ..users.model import User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)

OTP_ALPHABET = string.ascii_letters + string.digits


class OtpEngine:
    """Issues and consumes the single one-time password attached to a user.

    Codes never expire; a code stays valid until it is consumed or replaced by
    the next issuance.
    """

    def __init__(self, users: UserRepository, *, length: int = OTP_LENGTH):
        self._users = users
        self._length = int(length)

    def generate(self) -> str:
        return "".join(secrets.choice(OTP_ALPHABET) for _ in range(self._length))

    def issue(self, user: User) -> User:
        """Return ``user`` carrying a fresh code. Not persisted; see :meth:`store`."""
        return replace(user, otp=self.generate())

    def store(self, user: User) -> User:
        return self._users.save(user)

    @staticmethod
    def matches(user: Optional[User], submitted: Optional[str]) -> bool:
        if user is None or not user.otp or not isinstance(submitted, str):
            return False
        return hmac.compare_digest(user.otp.encode("utf-8"), submitted.encode("utf-8"))

    def find_holder(self, submitted: str) -> Optional[User]:
        if not submitted:
            return None
        return self._users.get_by_otp(submitted)

    def consume(
        self,
        user: User,
        submitted: str,
        *,
        unlock: bool = False,
        password_hash: Optional[str] = None,
        username: Optional[str] = None,
    ) -> Optional[User]:
        """Atomically clear the code and apply the flow's change.

        Returns the updated user, or ``None`` when the code no longer matches
        (wrong code, or a concurrent request consumed it first).
        """
        if not self.matches(user, submitted):
            return None
        won = self._users.consume_otp(
            user.user_id,
            submitted,
            unlock=unlock,
            password_hash=password_hash,
            username=username,
        )
        if not won:
            logger.warning("OTP for user id %s was consumed concurrently", user.user_id)
            return None

        changes: dict = {"otp": None}
        if unlock:
            changes["is_locked"] = False
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if username is not None:
            changes["username"] = username
        return replace(user, **changes)
