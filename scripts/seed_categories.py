"""Load task categories from a CSV file into the configured database.

Usage: python scripts/seed_categories.py path/to/categories.csv [--dry-run]
Columns: role,name,sort_order,requires_description,is_active
Existing (role, name) rows are updated in place, so the file can be re-applied.
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

from src.time_tracker.time_tracker.categories.seed import read_category_csv
from src.time_tracker.time_tracker.core.exceptions import ValidationError
from src.time_tracker.time_tracker.core.log import configure_logging
from src.time_tracker.time_tracker.database.bootstrap import upsert_categories
from src.time_tracker.time_tracker.database.connection import DBConfig


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("csv_path", nargs="?", default=str(REPO_ROOT / "database" / "categories.example.csv"))
    parser.add_argument("--dry-run", action="store_true", help="validate the file without writing")
    args = parser.parse_args(argv)

    try:
        seeds = read_category_csv(args.csv_path)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        for s in seeds:
            flag = " (description required)" if s.requires_description else ""
            print(f"{s.role.value:<11} {s.sort_order:>3}  {s.name}{flag}")
        print(f"OK: {len(seeds)} categories valid")
        return 0

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    written = upsert_categories(db_config, seeds)
    print(f"OK: {written} categories -> {DBConfig.from_mapping(db_config).describe()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
