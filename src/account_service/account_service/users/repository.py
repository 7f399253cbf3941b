from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from ..profiles.model import Profile
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_otp(self, otp: str) -> Optional[User]:
        """Lowest-id user whose pending OTP equals ``otp``."""
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def save(self, user: User) -> User:
        """Insert when ``user.user_id`` is None, update otherwise. Returns the stored user."""
        raise NotImplementedError

    def register_account(self, user: User, profile: Profile) -> Tuple[User, Profile]:
        """Insert ``user`` and link ``profile`` to it in one transaction.

        A profile without ``profile_id`` is inserted. Raises UsernameExistsError or
        ProfileExistsError and persists nothing when either side is taken.
        """
        raise NotImplementedError

    def consume_otp(
        self,
        user_id: int,
        expected_otp: str,
        *,
        unlock: bool = False,
        password_hash: Optional[str] = None,
        username: Optional[str] = None,
    ) -> bool:
        """Clear the OTP (and apply the given changes) only if it still equals ``expected_otp``.

        Raises UsernameExistsError when the new ``username`` is already taken.
        """
        raise NotImplementedError
