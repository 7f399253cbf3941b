from __future__ import annotations

from dataclasses import replace
from typing import Optional

from mysql.connector import errors as mysql_errors

from ..core.enums import PersonKind
from ..core.exceptions import ProfileExistsError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Profile
from .repository import ProfileRepository


def insert_profile(cur, profile: Profile) -> Profile:
    """Insert ``profile`` on an open cursor. A duplicate number or user raises ProfileExistsError."""
    kind = profile.kind
    try:
        cur.execute(
            f"""
            INSERT INTO {kind.table}({kind.number_column}, email, first_name, last_name, user_id)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (profile.number, profile.email, profile.first_name, profile.last_name, profile.user_id),
        )
    except mysql_errors.IntegrityError as e:
        raise ProfileExistsError(f"An account already exists for this {kind.value}") from e
    return replace(profile, profile_id=int(cur.lastrowid))


def claim_profile(cur, profile: Profile, user_id: int) -> Profile:
    """Link ``profile`` to ``user_id`` only while it is still unlinked."""
    kind = profile.kind
    cur.execute(
        f"UPDATE {kind.table} SET user_id=%s WHERE {kind.id_column}=%s AND user_id IS NULL",
        (user_id, profile.profile_id),
    )
    if cur.rowcount == 0:
        raise ProfileExistsError(f"An account already exists for this {kind.value}")
    return profile.link_user(user_id)


class MySQLProfileRepository(ProfileRepository):
    """Profiles of one kind, stored in that kind's table (``employees``, ``students``, ...)."""

    def __init__(self, conn_factory: DatabaseConnection, kind: PersonKind):
        self._conn_factory = conn_factory
        self.kind = kind

    def _select(self) -> str:
        k = self.kind
        return (
            f"SELECT {k.id_column} AS profile_id, {k.number_column} AS number, "
            f"email, first_name, last_name, user_id FROM {k.table}"
        )

    def _row_to_profile(self, row: dict) -> Profile:
        return Profile(
            kind=self.kind,
            profile_id=int(row["profile_id"]),
            number=row["number"],
            email=row.get("email"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        )

    def _get_one(self, where: str, params: tuple) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._select()} WHERE {where} LIMIT 1", params)
            row = fetchone(cur)
            return self._row_to_profile(row) if row else None

    def get_by_number(self, number: str) -> Optional[Profile]:
        return self._get_one(f"{self.kind.number_column}=%s", (number,))

    def get_by_user_id(self, user_id: int) -> Optional[Profile]:
        return self._get_one("user_id=%s", (user_id,))

    def get_by_email(self, email: str) -> Optional[Profile]:
        return self._get_one("email=%s", (email,))

    def save(self, profile: Profile) -> Profile:
        k = self.kind
        with db_cursor(self._conn_factory) as (_, cur):
            if profile.profile_id is None:
                return insert_profile(cur, profile)

            cur.execute(
                f"""
                UPDATE {k.table}
                SET {k.number_column}=%s, email=%s, first_name=%s, last_name=%s, user_id=%s
                WHERE {k.id_column}=%s
                """,
                (profile.number, profile.email, profile.first_name, profile.last_name, profile.user_id,
                 profile.profile_id),
            )
            return profile

    def link_user(self, profile: Profile, user_id: int) -> Profile:
        with db_cursor(self._conn_factory) as (_, cur):
            return claim_profile(cur, profile, user_id)
