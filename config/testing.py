import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TIMEZONE = "Europe/Brussels"

DISPLAY_START_MINUTE = 360
DISPLAY_END_MINUTE = 1140
SLOT_MINUTES = 30

POLL_INTERVAL_SECONDS = 15

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
