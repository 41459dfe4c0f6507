"""Constants and defaults.

Runtime values come from the settings module; these are the fallbacks.
"""

DEFAULT_TIMEZONE = "Europe/Brussels"

# Visible calendar window: 06:00 -> 19:00 in 30 minute rows.
DEFAULT_DISPLAY_START_MINUTE = 6 * 60
DEFAULT_DISPLAY_END_MINUTE = 19 * 60
DEFAULT_SLOT_MINUTES = 30

DEFAULT_POLL_INTERVAL_SECONDS = 15
DEFAULT_RECENT_SESSIONS_LIMIT = 30

MINUTES_PER_DAY = 24 * 60
