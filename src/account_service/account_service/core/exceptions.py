class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PasswordPolicyError(ValidationError):
    """Raised when a password does not satisfy the password policy."""


class NotFoundError(DomainError):
    """Raised when a user, profile or email cannot be resolved."""


class UsernameNotFoundError(NotFoundError):
    pass


class ProfileNotFoundError(NotFoundError):
    pass


class AlreadyExistsError(DomainError):
    """Raised when a username or person profile is already taken."""


class UsernameExistsError(AlreadyExistsError):
    pass


class ProfileExistsError(AlreadyExistsError):
    pass


class OtpMismatchError(DomainError):
    """Raised when a submitted one-time password does not match the stored one."""


class DeliveryError(DomainError):
    """Raised when a one-time password could not be delivered."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AccountLockedError(AuthenticationError):
    """Raised when credentials are valid but the account is locked."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
