import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Organisational timezone for day/week boundaries.
TIMEZONE = os.getenv("TIMEZONE", "Europe/Brussels")

# Week calendar: visible window in minutes since midnight, and row size.
DISPLAY_START_MINUTE = int(os.getenv("DISPLAY_START_MINUTE", "360"))
DISPLAY_END_MINUTE = int(os.getenv("DISPLAY_END_MINUTE", "1140"))
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "30"))

# Clients re-fetch live/week views at this interval.
POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", "15"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
