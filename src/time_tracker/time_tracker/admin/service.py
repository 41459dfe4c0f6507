from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc, seconds_between, to_naive_utc
from ..sessions.model import LiveSessionRow
from ..sessions.repository import SessionRepository


@dataclass(frozen=True)
class LiveEntry:
    session: LiveSessionRow
    elapsed_sec: int


class LiveViewService:
    """Who is timing what right now, oldest running timer first.

    Timers are never closed automatically; a forgotten one simply keeps
    growing here until its owner stops it.
    """

    def __init__(self, sessions: SessionRepository, *, clock: Callable[[], datetime] = now_utc):
        self._sessions = sessions
        self._clock = clock

    def active_sessions(self, *, now: Optional[datetime] = None) -> list[LiveEntry]:
        now = to_naive_utc(now) if now else self._clock()
        return [
            LiveEntry(session=row, elapsed_sec=seconds_between(row.started_at, now))
            for row in self._sessions.list_open()
        ]
