from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import PersonKind
from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for one person kind's profiles."""

    kind: PersonKind

    def get_by_number(self, number: str) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def save(self, profile: Profile) -> Profile:
        raise NotImplementedError

    def link_user(self, profile: Profile, user_id: int) -> Profile:
        """Link an unlinked profile. Raises ProfileExistsError if another user got it first."""
        raise NotImplementedError
