from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_utc, format_hms, now_utc, seconds_between, to_local, to_naive_utc
from ..core.constants import DEFAULT_RECENT_SESSIONS_LIMIT
from ..core.exceptions import ValidationError
from ..sessions.model import TimeSession
from ..sessions.repository import SessionRepository


def effective_duration(session: TimeSession, now: datetime) -> int:
    """Stored duration for closed sessions; elapsed time so far for the open one."""
    if session.duration_sec is not None:
        return max(0, int(session.duration_sec))
    if session.ended_at is not None:
        return seconds_between(session.started_at, session.ended_at)
    return seconds_between(session.started_at, now)


def clipped_duration(session: TimeSession, *, start: datetime, end: datetime, now: datetime) -> int:
    """Seconds of the session that fall inside [start, end)."""
    s_start = max(as_utc(start), as_utc(session.started_at))
    s_end = min(as_utc(end), as_utc(session.ended_at or now))
    return seconds_between(s_start, s_end)


def window_total(sessions: Iterable[TimeSession], *, start: datetime, end: datetime, now: datetime) -> int:
    """Seconds of overlap between the sessions and [start, end)."""
    return sum(clipped_duration(s, start=start, end=end, now=now) for s in sessions)


@dataclass(frozen=True)
class CategoryTotal:
    category_id: int
    category_name: str
    seconds: int

    @property
    def hms(self) -> str:
        return format_hms(self.seconds)


def group_by_category(
    sessions: Iterable[TimeSession],
    *,
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[CategoryTotal]:
    """Totals per category, largest first; ties keep first-seen order.

    With a [start, end) window each session only contributes its overlap.
    """
    clip = start is not None and end is not None
    names: dict[int, str] = {}
    seconds: dict[int, int] = {}
    for s in sessions:
        if s.category_id not in seconds:
            names[s.category_id] = s.category_name or ""
            seconds[s.category_id] = 0
        if clip:
            seconds[s.category_id] += clipped_duration(s, start=start, end=end, now=now)
        else:
            seconds[s.category_id] += effective_duration(s, now)

    totals = [CategoryTotal(category_id=cid, category_name=names[cid], seconds=sec) for cid, sec in seconds.items()]
    totals.sort(key=lambda t: t.seconds, reverse=True)
    return totals


@dataclass(frozen=True)
class HistoryRow:
    session_id: int
    category_id: int
    category_name: str
    started_at: datetime
    ended_at: Optional[datetime]
    duration_sec: int
    description: Optional[str]
    is_running: bool


@dataclass(frozen=True)
class HistorySummary:
    today_total: int
    today_by_category: list[CategoryTotal]
    week_total: int
    week_by_category: list[CategoryTotal]
    recent: list[HistoryRow]


class HistoryService:
    """Per-user day and week totals.

    Totals count the part of each session that falls inside the local day or
    week, so a session running past midnight is split between both days.
    The recent list holds sessions started this week, newest first.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        tz: ZoneInfo,
        clock: Callable[[], datetime] = now_utc,
        recent_limit: int = DEFAULT_RECENT_SESSIONS_LIMIT,
    ):
        self._sessions = sessions
        self._tz = tz
        self._clock = clock
        self._recent_limit = int(recent_limit)

    def summary(self, user_id: int, *, now: Optional[datetime] = None) -> HistorySummary:
        now = to_naive_utc(now) if now else self._clock()
        local_now = to_local(now, self._tz)

        today_start = datetime.combine(local_now.date(), time(0), tzinfo=self._tz)
        week_start = datetime.combine(local_now.date() - timedelta(days=local_now.weekday()), time(0), tzinfo=self._tz)
        today_end = datetime.combine(local_now.date() + timedelta(days=1), time(0), tzinfo=self._tz)
        week_end = week_start + timedelta(days=7)

        overlapping = self._sessions.list_overlapping(
            user_id, start=to_naive_utc(week_start), end=to_naive_utc(week_end)
        )
        week_sessions = [s for s in overlapping if as_utc(s.ended_at or now) > as_utc(week_start)]
        today_sessions = [s for s in week_sessions if as_utc(s.ended_at or now) > as_utc(today_start)]
        recent = self._sessions.list_started_since(user_id, since=to_naive_utc(week_start))

        return HistorySummary(
            today_total=window_total(today_sessions, start=today_start, end=today_end, now=now),
            today_by_category=group_by_category(today_sessions, now=now, start=today_start, end=today_end),
            week_total=window_total(week_sessions, start=week_start, end=week_end, now=now),
            week_by_category=group_by_category(week_sessions, now=now, start=week_start, end=week_end),
            recent=[
                HistoryRow(
                    session_id=s.session_id,
                    category_id=s.category_id,
                    category_name=s.category_name or "",
                    started_at=s.started_at,
                    ended_at=s.ended_at,
                    duration_sec=effective_duration(s, now),
                    description=s.description,
                    is_running=s.is_open,
                )
                for s in recent[: self._recent_limit]
            ],
        )


REPORT_FIELDS = [
    "session_id",
    "user_id",
    "user_name",
    "category_name",
    "date",
    "started_at",
    "ended_at",
    "duration",
    "duration_sec",
    "description",
]


class SessionReportService:
    """Flat session export between two local dates (inclusive)."""

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        tz: ZoneInfo,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._sessions = sessions
        self._tz = tz
        self._clock = clock

    def build(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[dict]:
        if end < start:
            raise ValidationError("End date must not be before start date")

        now = to_naive_utc(now) if now else self._clock()
        lo = datetime.combine(start, time(0), tzinfo=self._tz)
        hi = datetime.combine(end + timedelta(days=1), time(0), tzinfo=self._tz)

        rows = self._sessions.list_for_report(start=to_naive_utc(lo), end=to_naive_utc(hi), user_id=user_id)

        out: list[dict] = []
        for r in rows:
            started = to_local(r.started_at, self._tz)
            ended = to_local(r.ended_at, self._tz) if r.ended_at else None
            if r.duration_sec is not None:
                seconds = r.duration_sec
            else:
                seconds = seconds_between(r.started_at, r.ended_at or now)
            out.append(
                {
                    "session_id": r.session_id,
                    "user_id": r.user_id,
                    "user_name": r.user_name,
                    "category_name": r.category_name,
                    "date": started.strftime("%Y-%m-%d"),
                    "started_at": started.strftime("%H:%M:%S"),
                    "ended_at": ended.strftime("%Y-%m-%d %H:%M:%S") if ended else "",
                    "duration": format_hms(seconds),
                    "duration_sec": seconds,
                    "description": r.description or "",
                }
            )
        return out
