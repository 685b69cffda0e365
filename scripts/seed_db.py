from __future__ import annotations

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from attendance_tracker.database.bootstrap import DEMO_USERS, ensure_demo_users
from attendance_tracker.database.connection import DatabaseConnection, DBConfig


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = DBConfig.from_dict(settings.DB_CONFIG)

    ensure_demo_users(DatabaseConnection(db_config))

    print(f"OK: Seeded {len(DEMO_USERS)} demo accounts -> {db_config.database}")
    for full_name, email, password, role, _, _ in DEMO_USERS:
        print(f"  {role:<9} {email:<24} {password}  ({full_name})")


if __name__ == "__main__":
    main()
