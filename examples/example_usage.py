"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the lifecycle rules live in the services.
"""

import importlib

from config import get_settings_module

from src.time_tracker.time_tracker.container import AppSettings, build_container
from src.time_tracker.time_tracker.core.enums import Role
from src.time_tracker.time_tracker.users.model import Identity


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=AppSettings.from_module(settings))

    me = Identity(user_id=1, role=Role.ACCOUNTING)
    print(container.lifecycle_service.current(me))
    print(container.history_service.summary(me.user_id))


if __name__ == "__main__":
    main()
