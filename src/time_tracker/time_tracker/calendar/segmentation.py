"""Split timing sessions into per-day calendar segments for one ISO week.

All boundary arithmetic happens on UTC instants; wall-clock values in the
organisational timezone are only read off when computing minute offsets, so
DST transitions cannot reorder or duplicate slices.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_utc
from ..core.constants import (
    DEFAULT_DISPLAY_END_MINUTE,
    DEFAULT_DISPLAY_START_MINUTE,
    DEFAULT_SLOT_MINUTES,
    MINUTES_PER_DAY,
)
from ..sessions.model import TimeSession


@dataclass(frozen=True)
class WeekWindow:
    """Monday 00:00 up to (not including) the next Monday 00:00 in ``tz``."""

    monday: date
    tz: ZoneInfo

    @property
    def start(self) -> datetime:
        return _local_midnight(self.monday, self.tz)

    @property
    def end(self) -> datetime:
        return _local_midnight(self.monday + timedelta(days=7), self.tz)

    @property
    def start_utc(self) -> datetime:
        return self.start.astimezone(timezone.utc)

    @property
    def end_utc(self) -> datetime:
        return self.end.astimezone(timezone.utc)

    @property
    def days(self) -> list[date]:
        return [self.monday + timedelta(days=i) for i in range(7)]

    def iso(self) -> str:
        return self.monday.isoformat()


@dataclass(frozen=True)
class Segment:
    id: str
    session_id: int
    day_index: int  # 0=Monday .. 6=Sunday
    start_min: int
    end_min: int  # 1440 when the slice runs to midnight
    category_id: int
    category_name: str
    description: Optional[str] = None

    @property
    def minutes(self) -> int:
        return self.end_min - self.start_min


@dataclass(frozen=True)
class GridPlacement:
    segment_id: str
    column: int
    row_start: int
    row_end: int
    visible: bool


@dataclass(frozen=True)
class DisplayGrid:
    """Visible part of a day split into fixed rows (06:00-19:00 by 30 minutes by default).

    Rows are 1-based and row 1 is the header, so the first slot is row 2.
    """

    start_min: int = DEFAULT_DISPLAY_START_MINUTE
    end_min: int = DEFAULT_DISPLAY_END_MINUTE
    slot_min: int = DEFAULT_SLOT_MINUTES

    def __post_init__(self):
        if not (0 <= self.start_min < self.end_min <= MINUTES_PER_DAY):
            raise ValueError(f"Invalid display window {self.start_min}-{self.end_min}")
        if self.slot_min <= 0 or (self.end_min - self.start_min) % self.slot_min:
            raise ValueError(f"Slot size {self.slot_min} must divide the display window")

    @property
    def rows(self) -> int:
        return (self.end_min - self.start_min) // self.slot_min

    def slot_labels(self) -> list[str]:
        return [_fmt_hhmm(self.start_min + r * self.slot_min) for r in range(self.rows)]

    def clamp(self, minutes: int) -> int:
        return min(self.end_min, max(self.start_min, minutes))

    def row_for(self, minutes: int) -> int:
        return (self.clamp(minutes) - self.start_min) // self.slot_min + 2

    def row_end(self, start_min: int, end_min: int) -> int:
        s = self.clamp(start_min)
        e = self.clamp(end_min)
        span = max(1, math.ceil((e - s) / self.slot_min))
        return self.row_for(s) + span

    def place(self, segment: Segment) -> GridPlacement:
        return GridPlacement(
            segment_id=segment.id,
            column=segment.day_index,
            row_start=self.row_for(segment.start_min),
            row_end=self.row_end(segment.start_min, segment.end_min),
            visible=segment.end_min > self.start_min and segment.start_min < self.end_min,
        )


def _fmt_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(0), tzinfo=tz)


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_window(day: date | datetime, tz: ZoneInfo) -> WeekWindow:
    """Week containing ``day``; an aware datetime is first converted to ``tz``."""
    if isinstance(day, datetime):
        day = as_utc(day).astimezone(tz).date()
    return WeekWindow(monday=monday_of(day), tz=tz)


def _minute_of_day(instant: datetime, tz: ZoneInfo) -> int:
    local = instant.astimezone(tz)
    return local.hour * 60 + local.minute


def _epoch_ms(instant: datetime) -> int:
    return int(instant.timestamp()) * 1000 + instant.microsecond // 1000


def split_session(session: TimeSession, window: WeekWindow, *, now: datetime) -> list[Segment]:
    """Day slices of one session, clipped to the week; open sessions end at ``now``."""
    tz = window.tz
    lo, hi = window.start_utc, window.end_utc

    start = min(hi, max(lo, as_utc(session.started_at)))
    end = min(hi, max(lo, as_utc(session.ended_at or now)))
    if end <= start:
        return []

    out: list[Segment] = []
    cur = start
    while cur < end:
        day = cur.astimezone(tz).date()
        day_end = _local_midnight(day + timedelta(days=1), tz).astimezone(timezone.utc)
        seg_end = min(end, day_end)
        day_index = day.weekday()
        start_min = _minute_of_day(cur, tz)
        end_min = MINUTES_PER_DAY if seg_end == day_end else _minute_of_day(seg_end, tz)

        # Sub-minute slices have no visible height.
        if end_min <= start_min:
            cur = seg_end
            continue

        out.append(
            Segment(
                id=f"{session.session_id}-{day_index}-{_epoch_ms(cur)}",
                session_id=session.session_id,
                day_index=day_index,
                start_min=start_min,
                end_min=end_min,
                category_id=session.category_id,
                category_name=session.category_name or "",
                description=session.description,
            )
        )
        cur = seg_end

    return out


def split_sessions(sessions: Iterable[TimeSession], window: WeekWindow, *, now: datetime) -> list[Segment]:
    segments: list[Segment] = []
    for s in sessions:
        segments.extend(split_session(s, window, now=now))
    return segments
