"""Create the configured database (if missing) and apply database/schema.sql.

Usage: APP_ENV=development python scripts/init_db.py [--schema path/to/schema.sql]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.time_tracker.time_tracker.core.log import configure_logging
from src.time_tracker.time_tracker.database.bootstrap import apply_schema, list_tables
from src.time_tracker.time_tracker.database.connection import DBConfig


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--schema", default=str(REPO_ROOT / "database" / "schema.sql"))
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = list_tables(db_config)
    print(f"OK: schema applied -> {DBConfig.from_mapping(db_config).describe()} (tables={', '.join(sorted(tables))})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
