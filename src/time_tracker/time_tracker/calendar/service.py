from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_utc, now_utc, parse_iso_date, to_naive_utc
from ..core.exceptions import NotFoundError
from ..sessions.repository import SessionRepository
from ..users.model import User
from ..users.repository import UserRepository
from .segmentation import DisplayGrid, GridPlacement, Segment, WeekWindow, split_sessions, week_window


@dataclass(frozen=True)
class WeekView:
    """Read-model for the admin week calendar."""

    user: User
    users: list[User]
    window: WeekWindow
    grid: DisplayGrid
    segments: list[Segment] = field(default_factory=list)
    placements: list[GridPlacement] = field(default_factory=list)


class WeekViewService:
    def __init__(
        self,
        sessions: SessionRepository,
        users: UserRepository,
        *,
        tz: ZoneInfo,
        grid: Optional[DisplayGrid] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._sessions = sessions
        self._users = users
        self._tz = tz
        self._grid = grid or DisplayGrid()
        self._clock = clock

    def resolve_window(self, week: Optional[str], *, now: datetime) -> WeekWindow:
        """Week containing the ISO date ``week``; unparsable or missing means the current week."""
        if week:
            try:
                return week_window(parse_iso_date(week), self._tz)
            except ValueError:
                pass
        return week_window(as_utc(now), self._tz)

    def build(self, *, user_id: Optional[int] = None, week: Optional[str] = None, now: Optional[datetime] = None) -> WeekView:
        now = to_naive_utc(now) if now else self._clock()

        users = list(self._users.list_active())
        if not users:
            raise NotFoundError("No active users found")

        # Unknown user ids fall back to the first active user.
        user = next((u for u in users if u.user_id == user_id), users[0])
        window = self.resolve_window(week, now=now)

        sessions = self._sessions.list_overlapping(
            user.user_id,
            start=to_naive_utc(window.start_utc),
            end=to_naive_utc(window.end_utc),
        )
        segments = split_sessions(sessions, window, now=now)

        return WeekView(
            user=user,
            users=users,
            window=window,
            grid=self._grid,
            segments=segments,
            placements=[self._grid.place(s) for s in segments],
        )
