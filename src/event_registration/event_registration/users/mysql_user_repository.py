from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_date, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import NewUser, User
from .repository import UserRepository

_SELECT = """
    SELECT u.id_user, u.first_name, u.last_name, u.username, u.password_hash, u.birth_date,
           u.registration_number, u.profile_picture_url, u.id_role, r.name AS role_name,
           u.id_departement, d.name AS departement_name,
           u.is_deleted, u.deleted_at, u.deleted_by, u.created_at
    FROM users u
    JOIN roles r ON r.id_role = u.id_role
    LEFT JOIN departments d ON d.id_departement = u.id_departement
"""

_UPDATABLE = {
    "first_name",
    "last_name",
    "username",
    "birth_date",
    "registration_number",
    "password_hash",
    "id_role",
    "id_departement",
    "profile_picture_url",
}


def _to_user(row: dict) -> User:
    return User(
        id_user=int(row["id_user"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        id_role=int(row["id_role"]),
        role_name=row.get("role_name"),
        id_departement=row.get("id_departement"),
        departement_name=row.get("departement_name"),
        birth_date=as_date(row.get("birth_date")),
        registration_number=row.get("registration_number"),
        profile_picture_url=row.get("profile_picture_url"),
        is_deleted=as_bool(row.get("is_deleted")),
        deleted_at=row.get("deleted_at"),
        deleted_by=row.get("deleted_by"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple, include_deleted: bool) -> Optional[User]:
        sql = _SELECT + f" WHERE {where}"
        if not include_deleted:
            sql += " AND u.is_deleted=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: int, *, include_deleted: bool = False) -> Optional[User]:
        return self._get_one("u.id_user=%s", (user_id,), include_deleted)

    def get_by_username(self, username: str, *, include_deleted: bool = False) -> Optional[User]:
        return self._get_one("u.username=%s", (username,), include_deleted)

    def get_by_registration_number(self, registration_number: str, *, include_deleted: bool = False) -> Optional[User]:
        return self._get_one("u.registration_number=%s", (registration_number,), include_deleted)

    def list_active(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE u.is_deleted=0 ORDER BY u.last_name, u.first_name")
            return [_to_user(r) for r in fetchall(cur)]

    def list_ids_by_role(self, role_name: str) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id_user
                FROM users u
                JOIN roles r ON r.id_role = u.id_role
                WHERE LOWER(r.name)=LOWER(%s) AND u.is_deleted=0
                ORDER BY u.id_user
                """,
                (role_name,),
            )
            return [int(r["id_user"]) for r in fetchall(cur)]

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE is_deleted=0")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def create(self, user: NewUser) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(first_name, last_name, username, password_hash, birth_date,
                                      registration_number, id_role, id_departement)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user.first_name,
                        user.last_name,
                        user.username,
                        user.password_hash,
                        user.birth_date,
                        user.registration_number,
                        user.id_role,
                        user.id_departement,
                    ),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Username or registration number already exists") from exc
            raise

    def update(self, user_id: int, changes: Mapping[str, Any]) -> bool:
        columns = [c for c in changes if c in _UPDATABLE]
        if not columns:
            return False
        assignments = ", ".join(f"{c}=%s" for c in columns)
        params = tuple(changes[c] for c in columns) + (user_id,)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE users SET {assignments} WHERE id_user=%s AND is_deleted=0", params)
                return cur.rowcount > 0
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Username or registration number already exists") from exc
            raise

    def soft_delete(self, user_id: int, *, deleted_by: int, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users SET is_deleted=1, deleted_at=%s, deleted_by=%s
                WHERE id_user=%s AND is_deleted=0
                """,
                (deleted_at, deleted_by, user_id),
            )
            return cur.rowcount > 0
