from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_local
from ..common.validators import require_password_policy
from ..core.exceptions import AccountLockedError, AuthenticationError, UsernameNotFoundError
from ..users.model import User
from ..users.repository import UserRepository
from .attempts import LoginAttemptTracker
from .hasher import PasswordHasher

logger = logging.getLogger(__name__)


class CredentialService:
    """Use case: verify credentials, hash passwords and keep the lockout flag current."""

    def __init__(
        self,
        users: UserRepository,
        attempts: LoginAttemptTracker,
        hasher: PasswordHasher | None = None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._attempts = attempts
        self._hasher = hasher or PasswordHasher()
        self._clock = clock

    def validate_password(self, password: str) -> str:
        return require_password_policy(password)

    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return self._hasher.verify(password, password_hash)

    def _evaluate_lockout(self, user: User) -> User:
        # Failures are recorded as they happen; the lock flag is only recomputed here.
        if not user.is_locked:
            return replace(user, is_locked=self._attempts.has_exceeded_max_attempts(user.username))
        self._attempts.evict(user.username)
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self._users.get_by_username(username)
        if user is None:
            logger.warning("Login failed: username %r not found", username)
            raise UsernameNotFoundError("Username not found.")

        if not user.is_active or not self.verify_password(password or "", user.password_hash):
            failures = self._attempts.add_attempt(username)
            logger.info("Login failed for %r (%d recent failures)", username, failures)
            raise AuthenticationError("Invalid username or password")

        checked = self._evaluate_lockout(user)
        if checked.is_locked:
            if not user.is_locked:
                self._users.save(checked)
                logger.warning("Account %r locked after too many failed attempts", username)
            raise AccountLockedError(
                "Your account has been locked. Request a one-time password through forgot-password "
                "and verify it to unlock your account."
            )

        self._attempts.evict(username)
        logged_in = self._users.save(replace(checked, last_login_date=self._clock()))
        logger.info("User %r logged in", username)
        return logged_in
