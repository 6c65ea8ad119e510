from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Notification
from .repository import NotificationRepository


def _to_notification(row: dict) -> Notification:
    return Notification(
        id_notification=int(row["id_notification"]),
        id_user=int(row["id_user"]),
        type=NotificationType(row["type"]),
        message=row["message"],
        related_event_id=row.get("related_event_id"),
        is_read=as_bool(row.get("is_read")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        type: NotificationType,
        message: str,
        related_event_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(id_user, type, message, related_event_id, is_read)
                VALUES(%s,%s,%s,%s,0)
                """,
                (user_id, type.value, message, related_event_id),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int, *, limit: int, unread_only: bool = False) -> Sequence[Notification]:
        sql = """
            SELECT id_notification, id_user, type, message, related_event_id, is_read, created_at, updated_at
            FROM notifications
            WHERE id_user=%s
        """
        if unread_only:
            sql += " AND is_read=0"
        sql += " ORDER BY created_at DESC, id_notification DESC LIMIT %s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (user_id, int(limit)))
            return [_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM notifications WHERE id_user=%s AND is_read=0", (user_id,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_read(self, user_id: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id_notification FROM notifications WHERE id_notification=%s AND id_user=%s",
                (notification_id, user_id),
            )
            if not fetchone(cur):
                return False
            cur.execute("UPDATE notifications SET is_read=1 WHERE id_notification=%s", (notification_id,))
            return True

    def mark_all_read(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE id_user=%s AND is_read=0", (user_id,))
            return int(cur.rowcount)
