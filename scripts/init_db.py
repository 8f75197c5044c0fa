"""Create the sd_clockin schema, optionally with demo data and a first admin.

    APP_ENV=production python scripts/init_db.py --admin-email lead@school.edu
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.sd_clockin.sd_clockin.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    ensure_admin_user,
    list_tables,
)

EXPECTED_TABLES = ("admin_users", "checkins", "schedules", "shifts", "students", "term_days_off", "terms")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="also load database/seed.sql")
    parser.add_argument("--admin-email", default="", help="allow this Microsoft account to sign in as admin")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    database_dir = REPO_ROOT / "database"

    apply_schema(db_config, schema_path=database_dir / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")

    admin_email = args.admin_email or getattr(settings, "BOOTSTRAP_ADMIN_EMAIL", "")
    if admin_email:
        ensure_admin_user(db_config, email=admin_email)

    tables = set(list_tables(db_config))
    missing = [t for t in EXPECTED_TABLES if t not in tables]
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if missing:
        print(f"FAILED: {target} is missing tables: {', '.join(missing)}", file=sys.stderr)
        return 1

    print(f"OK: schema ready -> {target} (seeded={args.seed}, admin={admin_email or '-'})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
