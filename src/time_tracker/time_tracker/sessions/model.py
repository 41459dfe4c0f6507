from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class TimeSession:
    """Domain entity: one timed stretch of work on a category.

    ``ended_at is None`` means the session is open (the timer is running).
    Instants are naive UTC.
    """

    session_id: int
    user_id: int
    category_id: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_sec: Optional[int] = None
    description: Optional[str] = None
    category_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None


@dataclass(frozen=True)
class LiveSessionRow:
    """Read-model: an open session joined with its user and category."""

    session_id: int
    user_id: int
    user_name: str
    user_role: Role
    category_id: int
    category_name: str
    started_at: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class SessionReportRow:
    """Read-model for exports."""

    session_id: int
    user_id: int
    user_name: str
    category_id: int
    category_name: str
    started_at: datetime
    ended_at: Optional[datetime]
    duration_sec: Optional[int]
    description: Optional[str] = None
