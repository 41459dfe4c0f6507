"""Create or refresh an administrator account.

Usage: python scripts/create_admin.py "Admin" admin@example.com
The password is read from ADMIN_PASSWORD or prompted for.
"""

from __future__ import annotations

import argparse
import getpass
import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.time_tracker.time_tracker.database.bootstrap import upsert_admin


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("name")
    parser.add_argument("email")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    if len(password) < 8:
        sys.exit("Password must be at least 8 characters")

    user_id = upsert_admin(dict(settings.DB_CONFIG), name=args.name, email=args.email, password=password)
    print(f"OK: admin {args.email} ready (user_id={user_id})")


if __name__ == "__main__":
    main()
