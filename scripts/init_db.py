from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.workforce_admin.workforce_admin.database.bootstrap import apply_schema, ensure_admin_user, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql and create the first admin account.")
    parser.add_argument("--admin-username", default=None)
    parser.add_argument("--admin-password", default=None)
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    created = ensure_admin_user(
        db_config,
        username=args.admin_username or getattr(settings, "ADMIN_USERNAME", "admin"),
        password=args.admin_password or getattr(settings, "ADMIN_PASSWORD", None),
    )
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)}, admin_created={created})"
    )


if __name__ == "__main__":
    main()
