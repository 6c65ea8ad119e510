from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, is_duplicate_key, is_row_referenced
from .model import DropdownOption, FieldType, FormField, NewFormField
from .repository import FormRepository

_FIELD_SELECT = """
    SELECT f.id_field, f.id_event, f.label, f.is_required, f.sequence, f.accepted_file_types,
           t.id_type, t.field_name
    FROM form_fields f
    JOIN form_field_types t ON t.id_type = f.id_type
"""


def _to_option(row: dict) -> DropdownOption:
    return DropdownOption(
        id_option=int(row["id_option"]),
        id_field=int(row["id_field"]),
        value=row["value"],
        is_default=as_bool(row.get("is_default")),
    )


def _to_field(row: dict, options: Iterable[DropdownOption]) -> FormField:
    return FormField(
        id_field=int(row["id_field"]),
        id_event=int(row["id_event"]),
        label=row["label"],
        field_type=FieldType(id_type=int(row["id_type"]), field_name=row["field_name"]),
        is_required=as_bool(row.get("is_required")),
        sequence=int(row["sequence"]),
        accepted_file_types=row.get("accepted_file_types"),
        options=tuple(options),
    )


def _options_by_field(cur, field_ids: Sequence[int]) -> dict[int, list[DropdownOption]]:
    out: dict[int, list[DropdownOption]] = {fid: [] for fid in field_ids}
    if not field_ids:
        return out
    placeholders = ",".join(["%s"] * len(field_ids))
    cur.execute(
        f"""
        SELECT id_option, id_field, value, is_default
        FROM dropdown_options
        WHERE id_field IN ({placeholders})
        ORDER BY id_option
        """,
        tuple(field_ids),
    )
    for row in fetchall(cur):
        out[int(row["id_field"])].append(_to_option(row))
    return out


def _insert_options(cur, field_id: int, values: Iterable[str]) -> None:
    for value in values:
        cur.execute(
            "INSERT INTO dropdown_options(id_field, value, is_default) VALUES(%s,%s,0)",
            (field_id, value),
        )


def _insert_field(cur, event_id: int, new_field: NewFormField) -> int:
    cur.execute(
        """
        INSERT INTO form_fields(id_event, id_type, label, is_required, sequence, accepted_file_types)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (
            event_id,
            new_field.id_type,
            new_field.label,
            int(new_field.is_required),
            new_field.sequence,
            new_field.accepted_file_types,
        ),
    )
    field_id = int(cur.lastrowid)
    _insert_options(cur, field_id, new_field.options)
    return field_id


class MySQLFormRepository(FormRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_types(self) -> Sequence[FieldType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id_type, field_name FROM form_field_types ORDER BY id_type")
            return [FieldType(id_type=int(r["id_type"]), field_name=r["field_name"]) for r in fetchall(cur)]

    def create_type(self, field_name: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT INTO form_field_types(field_name) VALUES(%s)", (field_name,))
                return int(cur.lastrowid)
        except Exception as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Form field type already exists") from exc
            raise

    def list_fields(self, event_id: int) -> Sequence[FormField]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_FIELD_SELECT + " WHERE f.id_event=%s ORDER BY f.sequence", (event_id,))
            rows = fetchall(cur)
            options = _options_by_field(cur, [int(r["id_field"]) for r in rows])
            return [_to_field(r, options[int(r["id_field"])]) for r in rows]

    def get_field(self, field_id: int) -> Optional[FormField]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_FIELD_SELECT + " WHERE f.id_field=%s", (field_id,))
            row = fetchone(cur)
            if not row:
                return None
            options = _options_by_field(cur, [int(row["id_field"])])
            return _to_field(row, options[int(row["id_field"])])

    def replace_fields(self, event_id: int, fields: Sequence[NewFormField]) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    DELETE o FROM dropdown_options o
                    JOIN form_fields f ON f.id_field = o.id_field
                    WHERE f.id_event=%s
                    """,
                    (event_id,),
                )
                cur.execute("DELETE FROM form_fields WHERE id_event=%s", (event_id,))
                for new_field in fields:
                    _insert_field(cur, event_id, new_field)
        except Exception as exc:
            if is_row_referenced(exc):
                raise ConflictError("Form fields already have submitted responses and cannot be replaced") from exc
            raise

    def add_field(self, event_id: int, new_field: NewFormField) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert_field(cur, event_id, new_field)

    def update_field(
        self,
        field_id: int,
        *,
        label: str,
        id_type: int,
        is_required: bool,
        accepted_file_types: Optional[str],
        options: Optional[Sequence[str]],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE form_fields
                SET label=%s, id_type=%s, is_required=%s, accepted_file_types=%s
                WHERE id_field=%s
                """,
                (label, id_type, int(is_required), accepted_file_types, field_id),
            )
            if options is not None:
                cur.execute("DELETE FROM dropdown_options WHERE id_field=%s", (field_id,))
                _insert_options(cur, field_id, options)

    def delete_field(self, field_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT id_event, sequence FROM form_fields WHERE id_field=%s", (field_id,))
                row = fetchone(cur)
                if not row:
                    return False
                cur.execute("DELETE FROM dropdown_options WHERE id_field=%s", (field_id,))
                cur.execute("DELETE FROM form_fields WHERE id_field=%s", (field_id,))
                # Shift later fields down one by one, ascending, to keep (id_event, sequence) unique.
                cur.execute(
                    """
                    SELECT id_field FROM form_fields
                    WHERE id_event=%s AND sequence>%s
                    ORDER BY sequence
                    """,
                    (row["id_event"], row["sequence"]),
                )
                for later in fetchall(cur):
                    cur.execute(
                        "UPDATE form_fields SET sequence=sequence-1 WHERE id_field=%s",
                        (later["id_field"],),
                    )
                return True
        except Exception as exc:
            if is_row_referenced(exc):
                raise ConflictError("Form field has submitted responses and cannot be deleted") from exc
            raise

    def list_options(self, field_id: int) -> Sequence[DropdownOption]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _options_by_field(cur, [field_id])[field_id]

    def get_option(self, option_id: int) -> Optional[DropdownOption]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id_option, id_field, value, is_default FROM dropdown_options WHERE id_option=%s",
                (option_id,),
            )
            row = fetchone(cur)
            return _to_option(row) if row else None

    def add_option(self, field_id: int, *, value: str, is_default: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO dropdown_options(id_field, value, is_default) VALUES(%s,%s,%s)",
                (field_id, value, int(is_default)),
            )
            return int(cur.lastrowid)

    def update_option(self, option_id: int, *, value: str, is_default: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE dropdown_options SET value=%s, is_default=%s WHERE id_option=%s",
                (value, int(is_default), option_id),
            )
            return cur.rowcount > 0

    def delete_option(self, option_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM dropdown_options WHERE id_option=%s", (option_id,))
            return cur.rowcount > 0
