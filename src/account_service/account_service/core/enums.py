from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles. External people share the employee role."""

    EMPLOYEE = "ROLE_EMPLOYEE"
    STUDENT = "ROLE_STUDENT"
    GUEST = "ROLE_GUEST"


class PersonKind(str, Enum):
    """Person types a user account can be registered for.

    Each kind knows the role its users receive, the JSON field carrying its
    domain number and the table its profiles live in.
    """

    EMPLOYEE = "employee"
    STUDENT = "student"
    EXTERNAL = "external"
    GUEST = "guest"

    @property
    def role(self) -> Role:
        return _ROLE_BY_KIND[self]

    @property
    def number_field(self) -> str:
        return f"{self.value}Number"

    @property
    def table(self) -> str:
        return f"{self.value}s"

    @property
    def id_column(self) -> str:
        return f"{self.value}_id"

    @property
    def number_column(self) -> str:
        return f"{self.value}_number"


_ROLE_BY_KIND = {
    PersonKind.EMPLOYEE: Role.EMPLOYEE,
    PersonKind.STUDENT: Role.STUDENT,
    PersonKind.EXTERNAL: Role.EMPLOYEE,
    PersonKind.GUEST: Role.GUEST,
}

# Order in which a registration request's profile claims are considered.
REGISTRATION_PRECEDENCE = (
    PersonKind.EMPLOYEE,
    PersonKind.STUDENT,
    PersonKind.EXTERNAL,
    PersonKind.GUEST,
)

# Order in which linked profiles are searched for a contact email.
CONTACT_PRECEDENCE = (
    PersonKind.STUDENT,
    PersonKind.EMPLOYEE,
    PersonKind.EXTERNAL,
    PersonKind.GUEST,
)
