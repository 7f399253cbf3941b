from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Tuple

from mysql.connector import errors as mysql_errors

from ..core.enums import Role
from ..core.exceptions import UsernameExistsError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, join_csv, split_csv
from ..profiles.model import Profile
from ..profiles.mysql_profile_repository import claim_profile, insert_profile
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, username, password_hash, otp, role, authorities,
    is_locked, is_active, join_date, last_login_date
"""


def _user_params(user: User) -> tuple:
    return (
        user.username,
        user.password_hash,
        user.otp,
        user.role.value if user.role else None,
        join_csv(user.authorities),
        int(user.is_locked),
        int(user.is_active),
        user.join_date,
        user.last_login_date,
    )


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]) if row.get("role") else None,
        authorities=split_csv(row.get("authorities")),
        otp=row.get("otp"),
        is_locked=bool(row.get("is_locked", True)),
        is_active=bool(row.get("is_active", True)),
        join_date=row.get("join_date"),
        last_login_date=row.get("last_login_date"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}", params)
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id=%s", (user_id,))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_one("username=%s", (username,))

    def get_by_otp(self, otp: str) -> Optional[User]:
        return self._get_one("otp=%s ORDER BY user_id LIMIT 1", (otp,))

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id")
            return [_row_to_user(r) for r in fetchall(cur)]

    def _insert(self, cur, user: User) -> User:
        try:
            cur.execute(
                """
                INSERT INTO users(username, password_hash, otp, role, authorities,
                                  is_locked, is_active, join_date, last_login_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _user_params(user),
            )
        except mysql_errors.IntegrityError as e:
            raise UsernameExistsError("Username already exists.") from e
        return replace(user, user_id=int(cur.lastrowid))

    def save(self, user: User) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            if user.user_id is None:
                return self._insert(cur, user)

            cur.execute(
                """
                UPDATE users
                SET username=%s, password_hash=%s, otp=%s, role=%s, authorities=%s,
                    is_locked=%s, is_active=%s, join_date=%s, last_login_date=%s
                WHERE user_id=%s
                """,
                _user_params(user) + (user.user_id,),
            )
            return user

    def register_account(self, user: User, profile: Profile) -> Tuple[User, Profile]:
        # One transaction: a taken profile rolls back the user insert.
        with db_cursor(self._conn_factory) as (_, cur):
            stored = self._insert(cur, user)
            if profile.profile_id is None:
                linked = insert_profile(cur, profile.link_user(stored.user_id))
            else:
                linked = claim_profile(cur, profile, stored.user_id)
            return stored, linked

    def consume_otp(
        self,
        user_id: int,
        expected_otp: str,
        *,
        unlock: bool = False,
        password_hash: Optional[str] = None,
        username: Optional[str] = None,
    ) -> bool:
        assignments = ["otp=NULL"]
        params: list = []
        if unlock:
            assignments.append("is_locked=0")
        if password_hash is not None:
            assignments.append("password_hash=%s")
            params.append(password_hash)
        if username is not None:
            assignments.append("username=%s")
            params.append(username)

        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    f"UPDATE users SET {', '.join(assignments)} WHERE user_id=%s AND otp=%s",
                    (*params, user_id, expected_otp),
                )
            except mysql_errors.IntegrityError as e:
                raise UsernameExistsError("Username already exists!") from e
            return cur.rowcount > 0
