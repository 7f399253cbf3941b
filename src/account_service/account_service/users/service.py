from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ROLE_AUTHORITIES
from ..core.enums import CONTACT_PRECEDENCE, REGISTRATION_PRECEDENCE, PersonKind, Role
from ..core.exceptions import (
    DeliveryError,
    OtpMismatchError,
    ProfileExistsError,
    ProfileNotFoundError,
    UsernameExistsError,
    UsernameNotFoundError,
    ValidationError,
)
from ..credentials.service import CredentialService
from ..notifications.gateway import NotificationGateway
from ..otp.engine import OtpEngine
from ..profiles.model import Profile, ProfileClaim
from ..profiles.repository import ProfileRepository
from ..tokens.issuer import JwtTokenIssuer
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationRequest:
    """A candidate account plus the person records it claims to belong to."""

    username: str
    password: str
    claims: Mapping[PersonKind, ProfileClaim] = field(default_factory=dict)

    def selected_claim(self) -> Optional[ProfileClaim]:
        for kind in REGISTRATION_PRECEDENCE:
            claim = self.claims.get(kind)
            if claim is not None and claim.is_populated:
                return claim
        return None


@dataclass(frozen=True)
class RegistrationResult:
    user: User
    profile: Profile


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str


class AccountService:
    """Use cases: registration, login and the OTP-gated recovery flows.

    Composes the credential service, the OTP engine and the identity stores.
    ``role_authorities`` maps each role to the authorities its users receive.
    """

    def __init__(
        self,
        users: UserRepository,
        profiles: Mapping[PersonKind, ProfileRepository],
        credentials: CredentialService,
        otp: OtpEngine,
        notifications: NotificationGateway,
        tokens: JwtTokenIssuer,
        *,
        role_authorities: Mapping[Role, Sequence[str]] = DEFAULT_ROLE_AUTHORITIES,
        clock: Callable[[], datetime] = now_local,
    ):
        missing = [k.value for k in PersonKind if k not in profiles]
        if missing:
            raise ValueError(f"Missing profile repositories: {', '.join(missing)}")
        self._users = users
        self._profiles = profiles
        self._credentials = credentials
        self._otp = otp
        self._notifications = notifications
        self._tokens = tokens
        self._role_authorities = role_authorities
        self._clock = clock

    # -- registration -------------------------------------------------------

    def _resolve_profile(self, claim: ProfileClaim) -> Profile:
        repo = self._profiles[claim.kind]
        number = claim.number.strip()
        profile = repo.get_by_number(number)

        if profile is None:
            if claim.kind != PersonKind.GUEST:
                logger.warning("Registration rejected: no %s with number %r", claim.kind.value, number)
                raise ProfileNotFoundError(f"No {claim.kind.value} record found for number {number}")
            # Guests register themselves; their record comes from the request.
            profile = claim.to_profile()
            if not profile.has_email:
                raise ValidationError("Email is required to register as a guest")
            return profile

        if profile.user_id is not None:
            raise ProfileExistsError(f"An account already exists for this {claim.kind.value}")
        return profile

    def register(self, request: RegistrationRequest) -> RegistrationResult:
        claim = request.selected_claim()
        if claim is None:
            raise ValidationError("An employee, student, external or guest number is required")

        self._credentials.validate_password(request.password)
        username = require_non_empty(request.username, "Username")
        if self._users.get_by_username(username) is not None:
            raise UsernameExistsError("Username already exists.")

        profile = self._resolve_profile(claim)
        if not profile.has_email:
            raise DeliveryError("No email associated with this person to send the OTP to")

        role = claim.kind.role
        candidate = self._otp.issue(
            User(
                user_id=None,
                username=username,
                password_hash=self._credentials.hash_password(request.password),
                role=role,
                authorities=tuple(self._role_authorities.get(role, ())),
                is_locked=True,
                is_active=True,
                join_date=self._clock(),
            )
        )
        self._notifications.send_otp(profile.email, candidate.otp)

        user, linked = self._users.register_account(candidate, profile)
        logger.info("Registered %s account %r (user id %s)", claim.kind.value, username, user.user_id)
        return RegistrationResult(user=user, profile=linked)

    # -- login --------------------------------------------------------------

    def login(self, username: str, password: str) -> LoginResult:
        user = self._credentials.authenticate(username, password)
        return LoginResult(user=user, token=self._tokens.issue(user))

    def find_user(self, username: str) -> Optional[User]:
        return self._users.get_by_username(username)

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    # -- account unlock -----------------------------------------------------

    def verify_otp(self, username: str, otp: str) -> bool:
        user = self._users.get_by_username(username)
        if self._otp.consume(user, otp, unlock=True) is None:
            logger.info("Unlock rejected for %r", username)
            return False
        logger.info("Account %r unlocked", username)
        return True

    # -- forgot password ----------------------------------------------------

    def _contact_email(self, user: User) -> Optional[str]:
        for kind in CONTACT_PRECEDENCE:
            profile = self._profiles[kind].get_by_user_id(user.user_id)
            if profile is not None and profile.has_email:
                return profile.email
        return None

    def forgot_password(self, username: str) -> User:
        user = self._users.get_by_username(username)
        if user is None:
            raise UsernameNotFoundError("Username Not Found!")

        issued = self._otp.issue(user)
        email = self._contact_email(user)
        if email is None:
            logger.warning("Password reset for %r: no linked profile with an email", username)
            raise DeliveryError("No email associated with this user for password reset.")

        self._notifications.send_otp(email, issued.otp)
        stored = self._otp.store(issued)
        logger.info("Password reset OTP issued for %r", username)
        return stored

    def verify_otp_forgot_password(self, username: str, otp: str, new_password: str) -> User:
        self._credentials.validate_password(new_password)

        user = self._users.get_by_username(username)
        if user is None:
            raise UsernameNotFoundError("Username Not Found!")

        updated = self._otp.consume(user, otp, password_hash=self._credentials.hash_password(new_password))
        if updated is None:
            raise OtpMismatchError("Incorrect OTP code!")
        logger.info("Password reset completed for %r", username)
        return updated

    # -- forgot username ----------------------------------------------------

    def _find_user_by_email(self, email: str) -> Optional[User]:
        for kind in CONTACT_PRECEDENCE:
            profile = self._profiles[kind].get_by_email(email)
            if profile is not None and profile.user_id is not None:
                return self._users.get_by_id(profile.user_id)
        return None

    def forgot_username(self, email: str) -> User:
        email = require_non_empty(email, "Email")
        user = self._find_user_by_email(email)
        if user is None:
            raise UsernameNotFoundError("Email not associated with any username!")

        stored = self._otp.store(self._otp.issue(user))
        self._notifications.send_otp(email, stored.otp)
        logger.info("Username recovery OTP issued for user id %s", stored.user_id)
        return stored

    def verify_otp_forgot_username(self, otp: str, new_username: str) -> User:
        user = self._otp.find_holder(otp)
        if user is None:
            raise OtpMismatchError("Invalid OTP code!")

        new_username = require_non_empty(new_username, "Username")
        taken = self._users.get_by_username(new_username)
        if taken is not None and taken.user_id != user.user_id:
            raise UsernameExistsError("Username already exists!")

        renamed = self._otp.consume(user, otp, username=new_username)
        if renamed is None:
            raise OtpMismatchError("Invalid OTP code!")
        logger.info("User id %s renamed to %r", renamed.user_id, new_username)
        return renamed
