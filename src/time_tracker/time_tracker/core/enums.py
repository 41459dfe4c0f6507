from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role. Regular roles pick their own category list; ADMIN sees everything."""

    ACCOUNTING = "ACCOUNTING"
    RECEPTION = "RECEPTION"
    SALES = "SALES"
    MANAGEMENT = "MANAGEMENT"
    ADMIN = "ADMIN"

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN


class TrackerState(str, Enum):
    """Per-user timer state."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"
