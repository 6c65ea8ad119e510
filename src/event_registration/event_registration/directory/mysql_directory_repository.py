from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department, Role
from .repository import DepartmentRepository, RoleRepository


def _to_role(row: dict) -> Role:
    return Role(id_role=int(row["id_role"]), name=row["name"])


def _to_department(row: dict) -> Department:
    return Department(id_departement=int(row["id_departement"]), name=row["name"])


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_role, name FROM roles ORDER BY id_role")
            return [_to_role(r) for r in fetchall(cur)]

    def get_by_id(self, id_role: int) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_role, name FROM roles WHERE id_role=%s", (id_role,))
            row = fetchone(cur)
            return _to_role(row) if row else None

    def get_by_name(self, name: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_role, name FROM roles WHERE LOWER(name)=LOWER(%s)", (name,))
            row = fetchone(cur)
            return _to_role(row) if row else None

    def create(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO roles(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)

    def rename(self, id_role: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE roles SET name=%s WHERE id_role=%s", (name, id_role))
            return cur.rowcount > 0

    def delete(self, id_role: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM roles WHERE id_role=%s", (id_role,))
            return cur.rowcount > 0

    def count_users(self, id_role: int) -> int:
        # Soft-deleted users still reference the role.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE id_role=%s", (id_role,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_departement, name FROM departments ORDER BY name")
            return [_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, id_departement: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id_departement, name FROM departments WHERE id_departement=%s",
                (id_departement,),
            )
            row = fetchone(cur)
            return _to_department(row) if row else None

    def get_by_name(self, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_departement, name FROM departments WHERE name=%s", (name,))
            row = fetchone(cur)
            return _to_department(row) if row else None

    def create(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO departments(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)
