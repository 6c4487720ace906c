"""Create the MySQL database and the ``documents`` table from database/schema.sql.

Safe to re-run; every statement in the schema is idempotent.
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.site_ledger.site_ledger.database.bootstrap import apply_schema, list_tables


def main() -> None:
    db_config = dict(load_settings().DB_CONFIG)

    executed = apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    print(f"OK: {executed} statement(s) applied to {target}; tables: {', '.join(tables) or '-'}")


if __name__ == "__main__":
    main()
