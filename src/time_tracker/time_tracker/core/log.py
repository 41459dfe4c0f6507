from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Root of this package, e.g. "time_tracker" or "src.time_tracker.time_tracker".
PACKAGE_LOGGER = (__package__ or __name__).rsplit(".", 1)[0]


def configure_logging(level: str | int = "INFO") -> None:
    """Install one stream handler on the package logger (idempotent)."""

    root = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root.setLevel(level)

    if any(getattr(h, "_time_tracker", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._time_tracker = True  # type: ignore[attr-defined]
    root.addHandler(handler)
