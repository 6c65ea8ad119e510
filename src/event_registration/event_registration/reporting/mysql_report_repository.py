from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone
from .model import DailyRegistrationCount, DepartmentRegistrationCount, EventRegistrationCount
from .repository import ReportRepository


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def registrations_per_event(self) -> Sequence[EventRegistrationCount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.id_event, e.title_event, COUNT(i.id_inscription) AS n
                FROM events e
                LEFT JOIN inscriptions i ON i.id_event = e.id_event
                WHERE e.is_deleted=0
                GROUP BY e.id_event, e.title_event
                ORDER BY n DESC, e.title_event
                """
            )
            return [
                EventRegistrationCount(id_event=int(r["id_event"]), event_name=r["title_event"], count=int(r["n"]))
                for r in fetchall(cur)
            ]

    def registrations_over_time(self) -> Sequence[DailyRegistrationCount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DATE(i.created_at) AS day, COUNT(i.id_inscription) AS n
                FROM inscriptions i
                JOIN events e ON e.id_event = i.id_event
                WHERE e.is_deleted=0
                GROUP BY DATE(i.created_at)
                ORDER BY day ASC
                """
            )
            return [DailyRegistrationCount(day=as_date(r["day"]), count=int(r["n"])) for r in fetchall(cur)]

    def registrations_by_department(self) -> Sequence[DepartmentRegistrationCount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT d.name AS department, COUNT(i.id_inscription) AS n
                FROM inscriptions i
                JOIN events e ON e.id_event = i.id_event
                JOIN users u ON u.id_user = i.id_user
                LEFT JOIN departments d ON d.id_departement = u.id_departement
                WHERE e.is_deleted=0
                GROUP BY d.name
                ORDER BY n DESC
                """
            )
            return [
                DepartmentRegistrationCount(department_name=r.get("department"), count=int(r["n"]))
                for r in fetchall(cur)
            ]

    def count_registrations(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM inscriptions i
                JOIN events e ON e.id_event = i.id_event
                WHERE e.is_deleted=0
                """
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0
