from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.time_tracker.time_tracker.calendar.segmentation import (
    DisplayGrid,
    split_session,
    split_sessions,
    week_window,
)
from src.time_tracker.time_tracker.sessions.model import TimeSession

TZ = ZoneInfo("Europe/Brussels")


def local(*args) -> datetime:
    """Brussels wall time -> naive UTC (storage representation)."""
    return datetime(*args, tzinfo=TZ).astimezone(timezone.utc).replace(tzinfo=None)


def session(sid: int, start: datetime, end: datetime | None, **kw) -> TimeSession:
    return TimeSession(
        session_id=sid,
        user_id=1,
        category_id=kw.pop("category_id", 7),
        started_at=start,
        ended_at=end,
        category_name=kw.pop("category_name", "Emails"),
        **kw,
    )


WEEK = week_window(date(2026, 2, 4), TZ)  # Mon 2 Feb .. Mon 9 Feb 2026
NOW = local(2026, 2, 6, 12, 0)


def test_week_window_is_monday_to_monday():
    assert WEEK.monday == date(2026, 2, 2)
    assert WEEK.start == datetime(2026, 2, 2, tzinfo=TZ)
    assert WEEK.end == datetime(2026, 2, 9, tzinfo=TZ)
    assert WEEK.iso() == "2026-02-02"
    assert len(WEEK.days) == 7


def test_week_window_from_sunday_evening_instant():
    # Sunday 23:30 Brussels is still the same ISO week.
    w = week_window(datetime(2026, 2, 8, 22, 30, tzinfo=timezone.utc), TZ)
    assert w.monday == date(2026, 2, 2)


def test_single_day_session():
    segs = split_session(session(1, local(2026, 2, 3, 9, 0), local(2026, 2, 3, 10, 30)), WEEK, now=NOW)

    assert len(segs) == 1
    s = segs[0]
    assert (s.day_index, s.start_min, s.end_min) == (1, 540, 630)
    assert s.category_name == "Emails"


def test_wednesday_night_to_thursday_splits_at_midnight():
    s = session(42, local(2026, 2, 4, 22, 0), local(2026, 2, 5, 2, 0))

    segs = split_session(s, WEEK, now=NOW)

    assert [(g.day_index, g.start_min, g.end_min) for g in segs] == [(2, 1320, 1440), (3, 0, 120)]
    assert sum(g.minutes for g in segs) == 240


def test_multi_midnight_session_yields_one_segment_per_day():
    segs = split_session(session(5, local(2026, 2, 2, 18, 0), local(2026, 2, 5, 8, 0)), WEEK, now=NOW)

    assert [g.day_index for g in segs] == [0, 1, 2, 3]
    assert sum(g.minutes for g in segs) == (3 * 24 - 10) * 60


def test_session_is_clipped_to_week_window():
    # Starts the Sunday before, ends Monday 01:00.
    segs = split_session(session(6, local(2026, 2, 1, 20, 0), local(2026, 2, 2, 1, 0)), WEEK, now=NOW)

    assert [(g.day_index, g.start_min, g.end_min) for g in segs] == [(0, 0, 60)]


def test_session_outside_week_is_dropped():
    assert split_session(session(7, local(2026, 1, 20, 9, 0), local(2026, 1, 20, 10, 0)), WEEK, now=NOW) == []


def test_inverted_interval_is_dropped():
    assert split_session(session(8, local(2026, 2, 3, 10, 0), local(2026, 2, 3, 9, 0)), WEEK, now=NOW) == []


def test_open_session_ends_at_now_and_grows():
    s = session(9, local(2026, 2, 6, 9, 0), None)

    first = split_session(s, WEEK, now=local(2026, 2, 6, 10, 0))
    later = split_session(s, WEEK, now=local(2026, 2, 6, 11, 15))

    assert first[-1].end_min == 600
    assert later[-1].end_min == 675
    assert first[0].id == later[0].id


def test_segment_ids_are_deterministic_and_unique():
    sessions = [
        session(1, local(2026, 2, 2, 22, 0), local(2026, 2, 4, 3, 0)),
        session(2, local(2026, 2, 4, 9, 0), local(2026, 2, 4, 9, 30)),
    ]

    a = split_sessions(sessions, WEEK, now=NOW)
    b = split_sessions(sessions, WEEK, now=NOW)

    assert [s.id for s in a] == [s.id for s in b]
    assert len({s.id for s in a}) == len(a) == 4
    assert a[0].id.startswith("1-0-")


def test_segments_are_not_clipped_to_display_window():
    segs = split_session(session(3, local(2026, 2, 3, 5, 0), local(2026, 2, 3, 21, 0)), WEEK, now=NOW)
    assert (segs[0].start_min, segs[0].end_min) == (300, 1260)


def test_dst_spring_forward_day_keeps_wall_clock_offsets():
    week = week_window(date(2026, 3, 29), TZ)  # clocks jump 02:00 -> 03:00 on Sun 29 Mar
    s = session(11, local(2026, 3, 29, 1, 0), local(2026, 3, 29, 4, 0))

    segs = split_session(s, week, now=local(2026, 3, 30, 12, 0))

    assert [(g.day_index, g.start_min, g.end_min) for g in segs] == [(6, 60, 240)]


class TestDisplayGrid:
    grid = DisplayGrid()

    def test_defaults(self):
        assert self.grid.rows == 26
        assert self.grid.slot_labels()[0] == "06:00"
        assert self.grid.slot_labels()[-1] == "18:30"

    def test_rows_are_clamped_to_window(self):
        assert self.grid.row_for(0) == 2
        assert self.grid.row_for(360) == 2
        assert self.grid.row_for(389) == 2
        assert self.grid.row_for(390) == 3
        assert self.grid.row_for(2000) == 28

    def test_span_rounds_up_and_is_at_least_one(self):
        assert self.grid.row_end(540, 555) == self.grid.row_for(540) + 1
        assert self.grid.row_end(540, 631) == self.grid.row_for(540) + 4
        assert self.grid.row_end(1200, 1300) == 29  # fully after the window

    def test_place_marks_visibility(self):
        segs = split_session(session(1, local(2026, 2, 3, 20, 0), local(2026, 2, 3, 21, 0)), WEEK, now=NOW)
        placement = self.grid.place(segs[0])
        assert placement.visible is False
        assert placement.column == 1

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            DisplayGrid(start_min=600, end_min=500)
        with pytest.raises(ValueError):
            DisplayGrid(start_min=360, end_min=1140, slot_min=7)


def test_custom_timezone_moves_day_boundaries():
    utc_week = week_window(date(2026, 2, 4), ZoneInfo("UTC"))
    s = session(1, datetime(2026, 2, 4, 23, 30), datetime(2026, 2, 5, 0, 30))

    brussels = split_session(s, WEEK, now=NOW)
    in_utc = split_session(s, utc_week, now=NOW)

    assert [g.day_index for g in brussels] == [3]
    assert [g.day_index for g in in_utc] == [2, 3]
    assert timedelta(minutes=sum(g.minutes for g in in_utc)) == timedelta(hours=1)


def test_sub_minute_session_has_no_segment():
    s = session(12, local(2026, 2, 3, 10, 0, 10), local(2026, 2, 3, 10, 0, 50))
    assert split_session(s, WEEK, now=NOW) == []


def test_sub_minute_tail_after_midnight_is_dropped():
    s = session(13, local(2026, 2, 3, 23, 0), local(2026, 2, 4, 0, 0, 30))

    segs = split_session(s, WEEK, now=NOW)

    assert [(g.day_index, g.start_min, g.end_min) for g in segs] == [(1, 1380, 1440)]


def test_seconds_are_floored_per_boundary():
    s = session(14, local(2026, 2, 3, 10, 0, 10), local(2026, 2, 3, 10, 1, 5))
    assert [(g.start_min, g.end_min) for g in split_session(s, WEEK, now=NOW)] == [(600, 601)]
