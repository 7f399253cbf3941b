from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from account_service.container import assemble
from account_service.core.enums import PersonKind, Role
from account_service.core.exceptions import DeliveryError, ProfileExistsError, UsernameExistsError
from account_service.credentials.attempts import LoginAttemptTracker
from account_service.profiles.model import Profile
from account_service.tokens.issuer import JwtTokenIssuer
from account_service.users.model import User

JWT_SECRET = "unit-test-secret-0123456789abcdef-unit-test-secret-0123456789abcdef"


class InMemoryUsers:
    def __init__(self, profiles: dict[PersonKind, "InMemoryProfiles"]):
        self._profiles = profiles
        self._by_id: dict[int, User] = {}
        self._next_id = 1
        self.saves = 0

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.username == username), None)

    def get_by_otp(self, otp: str) -> Optional[User]:
        holders = [u for u in self._by_id.values() if u.otp is not None and u.otp == otp]
        return min(holders, key=lambda u: u.user_id) if holders else None

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: u.user_id)

    def save(self, user: User) -> User:
        self.saves += 1
        if user.user_id is None:
            user = replace(user, user_id=self._next_id)
            self._next_id += 1
        self._by_id[user.user_id] = user
        return user

    def register_account(self, user: User, profile: Profile):
        if self.get_by_username(user.username) is not None:
            raise UsernameExistsError("Username already exists.")
        stored = self.save(user)
        repo = self._profiles[profile.kind]
        try:
            if profile.profile_id is None:
                linked = repo.insert(profile.link_user(stored.user_id))
            else:
                linked = repo.link_user(profile, stored.user_id)
        except Exception:
            # rollback
            del self._by_id[stored.user_id]
            raise
        return stored, linked

    def consume_otp(self, user_id, expected_otp, *, unlock=False, password_hash=None, username=None) -> bool:
        current = self._by_id.get(user_id)
        if current is None or current.otp is None or current.otp != expected_otp:
            return False
        changes: dict = {"otp": None}
        if unlock:
            changes["is_locked"] = False
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if username is not None:
            if any(u.username == username and u.user_id != user_id for u in self._by_id.values()):
                raise UsernameExistsError("Username already exists!")
            changes["username"] = username
        self._by_id[user_id] = replace(current, **changes)
        return True


class InMemoryProfiles:
    def __init__(self, kind: PersonKind):
        self.kind = kind
        self._rows: list[Profile] = []

    def add(self, number: str, email: Optional[str] = None, *, user_id: Optional[int] = None) -> Profile:
        return self.save(Profile(kind=self.kind, profile_id=None, number=number, email=email, user_id=user_id))

    def get_by_number(self, number: str) -> Optional[Profile]:
        return next((p for p in self._rows if p.number == number), None)

    def get_by_user_id(self, user_id: int) -> Optional[Profile]:
        return next((p for p in self._rows if p.user_id == user_id), None)

    def get_by_email(self, email: str) -> Optional[Profile]:
        return next((p for p in self._rows if p.email == email), None)

    def all(self) -> list[Profile]:
        return list(self._rows)

    def save(self, profile: Profile) -> Profile:
        if profile.profile_id is None:
            profile = replace(profile, profile_id=len(self._rows) + 1)
            self._rows.append(profile)
            return profile
        self._rows = [profile if p.profile_id == profile.profile_id else p for p in self._rows]
        return profile

    def insert(self, profile: Profile) -> Profile:
        if self.get_by_number(profile.number) is not None:
            raise ProfileExistsError(f"An account already exists for this {self.kind.value}")
        return self.save(profile)

    def link_user(self, profile: Profile, user_id: int) -> Profile:
        current = next(p for p in self._rows if p.profile_id == profile.profile_id)
        if current.user_id is not None:
            raise ProfileExistsError(f"An account already exists for this {self.kind.value}")
        return self.save(current.link_user(user_id))


class RecordingGateway:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_otp(self, email: str, code: str) -> None:
        if self.fail:
            raise DeliveryError("Failed to send OTP email")
        self.sent.append((email, code))

    @property
    def last_code(self) -> Optional[str]:
        return self.sent[-1][1] if self.sent else None


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 6, 9, 30, 0)


@pytest.fixture
def users_repo(profile_repos) -> InMemoryUsers:
    return InMemoryUsers(profile_repos)


@pytest.fixture
def profile_repos() -> dict[PersonKind, InMemoryProfiles]:
    return {kind: InMemoryProfiles(kind) for kind in PersonKind}


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer(JWT_SECRET)


@pytest.fixture
def login_attempts() -> LoginAttemptTracker:
    return LoginAttemptTracker(max_attempts=3, window_seconds=900)


@pytest.fixture
def container(users_repo, profile_repos, gateway, token_issuer, login_attempts):
    return assemble(
        users_repo=users_repo,
        profile_repos=profile_repos,
        notifications=gateway,
        token_issuer=token_issuer,
        login_attempts=login_attempts,
    )


@pytest.fixture
def account_service(container):
    return container.account_service


@pytest.fixture
def make_user(users_repo):
    """Store a user directly, bypassing registration."""

    def _make(
        username: str,
        *,
        password: str = "secret#1",
        otp: Optional[str] = None,
        locked: bool = False,
        active: bool = True,
        role: Role = Role.EMPLOYEE,
    ) -> User:
        return users_repo.save(
            User(
                user_id=None,
                username=username,
                password_hash=generate_password_hash(password),
                role=role,
                authorities=("user:read",),
                otp=otp,
                is_locked=locked,
                is_active=active,
            )
        )

    return _make
