from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.event_registration.event_registration.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    ensure_demo_users,
    list_tables,
)

EXPECTED_TABLES = {
    "roles",
    "departments",
    "users",
    "events",
    "form_field_types",
    "form_fields",
    "dropdown_options",
    "inscriptions",
    "field_responses",
    "notifications",
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the event registration tables.")
    parser.add_argument("--seed", action="store_true", help="also load reference data and demo accounts")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)

    tables = set(list_tables(db_config))
    missing = sorted(EXPECTED_TABLES - tables)
    if missing:
        print(f"ERROR: {target} is missing tables: {', '.join(missing)}", file=sys.stderr)
        return 1
    print(f"OK: schema ready on {target} ({len(tables)} tables{', seeded' if args.seed else ''})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
