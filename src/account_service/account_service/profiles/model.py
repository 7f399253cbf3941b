from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..core.enums import PersonKind, Role


@dataclass(frozen=True)
class Profile:
    """A person record (employee, student, external or guest).

    ``number`` is the kind-specific identifier (employee number, student
    number, ...). ``email`` is only used to deliver one-time passwords.
    """

    kind: PersonKind
    profile_id: Optional[int]
    number: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    user_id: Optional[int] = None

    @property
    def role(self) -> Role:
        return self.kind.role

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())

    def link_user(self, user_id: int) -> "Profile":
        return replace(self, user_id=user_id)

    def to_public_dict(self) -> dict:
        return {
            "type": self.kind.value,
            self.kind.number_field: self.number,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }


@dataclass(frozen=True)
class ProfileClaim:
    """The person-type part of a registration request."""

    kind: PersonKind
    number: Optional[str]
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def is_populated(self) -> bool:
        return bool(self.number and self.number.strip())

    def to_profile(self) -> Profile:
        return Profile(
            kind=self.kind,
            profile_id=None,
            number=(self.number or "").strip(),
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
        )
