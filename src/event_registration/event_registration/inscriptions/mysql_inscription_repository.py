from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import FieldResponse, Inscription
from .repository import InscriptionRepository

_SELECT = """
    SELECT i.id_inscription, i.id_user, i.id_event, i.created_at,
           u.username, u.first_name, u.last_name, d.name AS departement_name,
           e.title_event
    FROM inscriptions i
    JOIN users u ON u.id_user = i.id_user
    LEFT JOIN departments d ON d.id_departement = u.id_departement
    JOIN events e ON e.id_event = i.id_event
"""

_RESPONSE_SELECT = """
    SELECT r.id_response, r.id_inscription, r.id_field, r.response_text, r.response_file_path,
           r.created_at, r.updated_at, f.label
    FROM field_responses r
    JOIN form_fields f ON f.id_field = r.id_field
"""


def _to_inscription(row: dict) -> Inscription:
    return Inscription(
        id_inscription=int(row["id_inscription"]),
        id_user=int(row["id_user"]),
        id_event=int(row["id_event"]),
        created_at=row.get("created_at"),
        username=row.get("username"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        departement_name=row.get("departement_name"),
        event_title=row.get("title_event"),
    )


def _to_response(row: dict) -> FieldResponse:
    return FieldResponse(
        id_response=int(row["id_response"]),
        id_inscription=int(row["id_inscription"]),
        id_field=int(row["id_field"]),
        response_text=row.get("response_text"),
        response_file_path=row.get("response_file_path"),
        field_label=row.get("label"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLInscriptionRepository(InscriptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _list(self, where: str = "", params: tuple = ()) -> Sequence[Inscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY i.created_at DESC, i.id_inscription DESC", params)
            return [_to_inscription(r) for r in fetchall(cur)]

    def get(self, inscription_id: int) -> Optional[Inscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE i.id_inscription=%s", (inscription_id,))
            row = fetchone(cur)
            return _to_inscription(row) if row else None

    def get_for_user_and_event(self, user_id: int, event_id: int) -> Optional[Inscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE i.id_user=%s AND i.id_event=%s", (user_id, event_id))
            row = fetchone(cur)
            return _to_inscription(row) if row else None

    def create(self, *, user_id: int, event_id: int, created_at: datetime) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO inscriptions(id_user, id_event, created_at) VALUES(%s,%s,%s)",
                    (user_id, event_id, created_at),
                )
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("User is already registered for this event") from exc
            raise

    def delete(self, inscription_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM inscriptions WHERE id_inscription=%s", (inscription_id,))
            return cur.rowcount > 0

    def list_for_event(self, event_id: int) -> Sequence[Inscription]:
        return self._list(" WHERE i.id_event=%s", (event_id,))

    def list_for_user(self, user_id: int) -> Sequence[Inscription]:
        return self._list(" WHERE i.id_user=%s", (user_id,))

    def list_all(self) -> Sequence[Inscription]:
        return self._list()

    def list_user_ids_for_event(self, event_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT i.id_user FROM inscriptions i
                JOIN users u ON u.id_user = i.id_user
                WHERE i.id_event=%s AND u.is_deleted=0
                ORDER BY i.id_user
                """,
                (event_id,),
            )
            return [int(r["id_user"]) for r in fetchall(cur)]

    def list_responses(self, inscription_id: int) -> Sequence[FieldResponse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_RESPONSE_SELECT + " WHERE r.id_inscription=%s ORDER BY f.sequence", (inscription_id,))
            return [_to_response(r) for r in fetchall(cur)]

    def list_responses_for_event(self, event_id: int) -> Sequence[FieldResponse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _RESPONSE_SELECT + " WHERE f.id_event=%s ORDER BY r.id_inscription, f.sequence",
                (event_id,),
            )
            return [_to_response(r) for r in fetchall(cur)]

    def upsert_response(
        self,
        *,
        inscription_id: int,
        field_id: int,
        response_text: Optional[str],
        response_file_path: Optional[str],
    ) -> FieldResponse:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO field_responses(id_inscription, id_field, response_text, response_file_path)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE response_text=VALUES(response_text),
                                        response_file_path=VALUES(response_file_path)
                """,
                (inscription_id, field_id, response_text, response_file_path),
            )
            cur.execute(
                _RESPONSE_SELECT + " WHERE r.id_inscription=%s AND r.id_field=%s",
                (inscription_id, field_id),
            )
            return _to_response(fetchone(cur))
