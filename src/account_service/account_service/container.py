from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .core.constants import (
    DEFAULT_JWT_AUDIENCE,
    DEFAULT_JWT_EXPIRATION_SECONDS,
    DEFAULT_JWT_ISSUER,
    DEFAULT_LOGIN_ATTEMPT_WINDOW_SECONDS,
    DEFAULT_MAX_LOGIN_ATTEMPTS,
    DEFAULT_ROLE_AUTHORITIES,
)
from .core.enums import PersonKind
from .credentials.attempts import LoginAttemptTracker
from .credentials.service import CredentialService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.gateway import (
    LoggingNotificationGateway,
    NotificationGateway,
    SmtpNotificationGateway,
    SmtpSettings,
)
from .otp.engine import OtpEngine
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .tokens.issuer import JwtTokenIssuer
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AccountService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    profile_repos: Mapping[PersonKind, ProfileRepository]
    login_attempts: LoginAttemptTracker
    notifications: NotificationGateway
    token_issuer: JwtTokenIssuer

    credential_service: CredentialService
    otp_engine: OtpEngine
    account_service: AccountService


def build_notifications(settings: Any) -> NotificationGateway:
    backend = str(getattr(settings, "MAIL_BACKEND", "log")).lower()
    if backend == "smtp":
        return SmtpNotificationGateway(
            SmtpSettings(
                host=str(getattr(settings, "MAIL_HOST", "localhost")),
                port=int(getattr(settings, "MAIL_PORT", 587)),
                username=str(getattr(settings, "MAIL_USERNAME", "")),
                password=str(getattr(settings, "MAIL_PASSWORD", "")),
                sender=str(getattr(settings, "MAIL_SENDER", "no-reply@example.com")),
                use_tls=bool(getattr(settings, "MAIL_USE_TLS", True)),
            )
        )
    if backend == "log":
        return LoggingNotificationGateway()
    raise ValueError(f"Unknown MAIL_BACKEND: {backend!r}")


def assemble(
    *,
    users_repo: UserRepository,
    profile_repos: Mapping[PersonKind, ProfileRepository],
    notifications: NotificationGateway,
    token_issuer: JwtTokenIssuer,
    login_attempts: Optional[LoginAttemptTracker] = None,
    conn: Optional[DatabaseConnection] = None,
    role_authorities=DEFAULT_ROLE_AUTHORITIES,
) -> Container:
    """Wire services on top of the given stores and collaborators."""
    login_attempts = login_attempts or LoginAttemptTracker()
    credential_service = CredentialService(users_repo, login_attempts)
    otp_engine = OtpEngine(users_repo)
    account_service = AccountService(
        users_repo,
        profile_repos,
        credential_service,
        otp_engine,
        notifications,
        token_issuer,
        role_authorities=role_authorities,
    )
    return Container(
        conn=conn,
        users_repo=users_repo,
        profile_repos=profile_repos,
        login_attempts=login_attempts,
        notifications=notifications,
        token_issuer=token_issuer,
        credential_service=credential_service,
        otp_engine=otp_engine,
        account_service=account_service,
    )


def build_container(settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    users_repo = MySQLUserRepository(conn)
    profile_repos = {kind: MySQLProfileRepository(conn, kind) for kind in PersonKind}

    token_issuer = JwtTokenIssuer(
        str(getattr(settings, "JWT_SECRET")),
        issuer=str(getattr(settings, "JWT_ISSUER", DEFAULT_JWT_ISSUER)),
        audience=str(getattr(settings, "JWT_AUDIENCE", DEFAULT_JWT_AUDIENCE)),
        expiration_seconds=int(getattr(settings, "JWT_EXPIRATION_SECONDS", DEFAULT_JWT_EXPIRATION_SECONDS)),
    )
    login_attempts = LoginAttemptTracker(
        max_attempts=int(getattr(settings, "MAX_LOGIN_ATTEMPTS", DEFAULT_MAX_LOGIN_ATTEMPTS)),
        window_seconds=int(getattr(settings, "LOGIN_ATTEMPT_WINDOW_SECONDS", DEFAULT_LOGIN_ATTEMPT_WINDOW_SECONDS)),
    )

    return assemble(
        users_repo=users_repo,
        profile_repos=profile_repos,
        notifications=build_notifications(settings),
        token_issuer=token_issuer,
        login_attempts=login_attempts,
        conn=conn,
    )
