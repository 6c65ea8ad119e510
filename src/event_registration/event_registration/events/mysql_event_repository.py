from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import EventStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_date, db_cursor, fetchall, fetchone
from .model import Event, NewEvent, RegisteredEvent
from .repository import EventRepository

_COLUMNS = """
    e.id_event, e.title_event, e.description, e.start_date, e.end_date,
    e.registration_start_date, e.registration_end_date, e.status,
    e.is_deleted, e.deleted_at, e.deleted_by, e.created_at, e.updated_at
"""

_UPDATABLE = {
    "title_event",
    "description",
    "start_date",
    "end_date",
    "registration_start_date",
    "registration_end_date",
    "status",
}


def _to_event(row: dict) -> Event:
    return Event(
        id_event=int(row["id_event"]),
        title_event=row["title_event"],
        description=row.get("description"),
        start_date=as_date(row["start_date"]),
        end_date=as_date(row["end_date"]),
        registration_start_date=as_date(row.get("registration_start_date")),
        registration_end_date=as_date(row.get("registration_end_date")),
        status=EventStatus(row["status"]),
        is_deleted=as_bool(row.get("is_deleted")),
        deleted_at=row.get("deleted_at"),
        deleted_by=row.get("deleted_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, event_id: int, *, include_deleted: bool = False) -> Optional[Event]:
        sql = f"SELECT {_COLUMNS} FROM events e WHERE e.id_event=%s"
        if not include_deleted:
            sql += " AND e.is_deleted=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (event_id,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def list_active(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events e WHERE e.is_deleted=0 ORDER BY e.start_date DESC, e.id_event DESC")
            return [_to_event(r) for r in fetchall(cur)]

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM events WHERE is_deleted=0")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def list_not_cancelled(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM events e WHERE e.is_deleted=0 AND e.status<>%s ORDER BY e.id_event",
                (EventStatus.CANCELLED.value,),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def list_registered_by_user(self, user_id: int) -> Sequence[RegisteredEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, i.created_at AS registered_at
                FROM inscriptions i
                JOIN events e ON e.id_event = i.id_event
                WHERE i.id_user=%s AND e.is_deleted=0
                ORDER BY e.start_date
                """,
                (user_id,),
            )
            return [RegisteredEvent(event=_to_event(r), registered_at=r.get("registered_at")) for r in fetchall(cur)]

    def create(self, event: NewEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(title_event, description, start_date, end_date,
                                   registration_start_date, registration_end_date, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.title_event,
                    event.description,
                    event.dates.start_date,
                    event.dates.end_date,
                    event.dates.registration_start_date,
                    event.dates.registration_end_date,
                    event.status.value,
                ),
            )
            return int(cur.lastrowid)

    def update(self, event_id: int, changes: Mapping[str, Any]) -> bool:
        columns = [c for c in changes if c in _UPDATABLE]
        if not columns:
            return False
        values = [changes[c].value if isinstance(changes[c], EventStatus) else changes[c] for c in columns]
        assignments = ", ".join(f"{c}=%s" for c in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE events SET {assignments} WHERE id_event=%s AND is_deleted=0",
                tuple(values) + (event_id,),
            )
            return cur.rowcount > 0

    def update_status(self, event_id: int, status: EventStatus) -> bool:
        return self.update(event_id, {"status": status})

    def soft_delete(self, event_id: int, *, deleted_by: int, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events SET is_deleted=1, deleted_at=%s, deleted_by=%s
                WHERE id_event=%s AND is_deleted=0
                """,
                (deleted_at, deleted_by, event_id),
            )
            return cur.rowcount > 0
