from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LOGIN_ATTEMPT_WINDOW_SECONDS, DEFAULT_MAX_LOGIN_ATTEMPTS


class LoginAttemptTracker:
    """
    In-memory counter of failed login attempts per username.

    A username has exceeded the limit once ``max_attempts`` failures were
    recorded within the last ``window_seconds``.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
        window_seconds: int = DEFAULT_LOGIN_ATTEMPT_WINDOW_SECONDS,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attempts: Dict[str, List[datetime]] = defaultdict(list)
        self._max_attempts = int(max_attempts)
        self._window = timedelta(seconds=int(window_seconds))
        self._clock = clock

    def _prune(self, username: str) -> List[datetime]:
        now = self._clock()
        recent = [t for t in self._attempts.get(username, []) if now - t < self._window]
        if recent:
            self._attempts[username] = recent
        else:
            self._attempts.pop(username, None)
        return recent

    def add_attempt(self, username: str) -> int:
        """Record a failed attempt and return the number of recent failures."""
        recent = self._prune(username)
        recent.append(self._clock())
        self._attempts[username] = recent
        return len(recent)

    def attempts(self, username: str) -> int:
        return len(self._prune(username))

    def has_exceeded_max_attempts(self, username: str) -> bool:
        return self.attempts(username) >= self._max_attempts

    def evict(self, username: str) -> None:
        self._attempts.pop(username, None)
