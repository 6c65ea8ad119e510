from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = (
    # (first_name, last_name, username, password, role, department, registration_number)
    ("Admin", "Demo", "admin", "admin123", "admin", "DSSI", "ADM-0001"),
    ("Employee", "Demo", "employee", "employee123", "employee", "DRH", "EMP-0001"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.strip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


@contextmanager
def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def _run_script(db_config: dict, path: str | Path) -> None:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    with _connect(db_config) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    database = DBConfig.from_dict(db_config).database
    with _connect(db_config, with_database=False) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, schema_path)
    logger.info("Schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, seed_path)
    logger.info("Seed data applied from %s", seed_path)


def ensure_demo_users(db_config: dict) -> None:
    with _connect(db_config) as conn:
        cur = conn.cursor(dictionary=True)

        def lookup(table: str, id_col: str, name: str) -> int:
            cur.execute(f"SELECT {id_col} AS id FROM {table} WHERE name=%s", (name,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing {table} row for name={name}")
            return int(row["id"])

        for first_name, last_name, username, password, role, department, reg_number in DEMO_ACCOUNTS:
            id_role = lookup("roles", "id_role", role)
            id_departement = lookup("departments", "id_departement", department)
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id_user FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, password_hash=%s, id_role=%s, id_departement=%s,
                        is_deleted=0, deleted_at=NULL, deleted_by=NULL
                    WHERE username=%s
                    """,
                    (first_name, last_name, password_hash, id_role, id_departement, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (first_name, last_name, username, password_hash, registration_number,
                                       id_role, id_departement)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (first_name, last_name, username, password_hash, reg_number, id_role, id_departement),
                )
    logger.info("Demo accounts ready: %s", ", ".join(acc[2] for acc in DEMO_ACCOUNTS))


def list_tables(db_config: dict) -> list[str]:
    with _connect(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
