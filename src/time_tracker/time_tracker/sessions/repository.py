from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..categories.model import TaskCategory
from .model import LiveSessionRow, SessionReportRow, TimeSession


class SessionTransaction(Protocol):
    """Read-modify-write access to one user's sessions inside a single transaction.

    Implementations serialize transactions for the same user; everything done
    through this object commits together or not at all.
    """

    user_id: int

    def get_category(self, category_id: int) -> Optional[TaskCategory]:
        raise NotImplementedError

    def find_open(self) -> Optional[TimeSession]:
        raise NotImplementedError

    def close(self, session_id: int, *, ended_at: datetime, duration_sec: int) -> bool:
        raise NotImplementedError

    def create(self, *, category_id: int, started_at: datetime, description: Optional[str]) -> int:
        """Insert an open session; raises ConflictError if one is already open."""
        raise NotImplementedError


class SessionRepository(Protocol):
    def transaction(self, user_id: int) -> AbstractContextManager[SessionTransaction]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[TimeSession]:
        raise NotImplementedError

    def list_open(self) -> Sequence[LiveSessionRow]:
        """All open sessions across users, oldest first."""
        raise NotImplementedError

    def list_overlapping(self, user_id: int, *, start: datetime, end: datetime) -> Sequence[TimeSession]:
        """Sessions with started_at < end and (ended_at >= start or still open), oldest first."""
        raise NotImplementedError

    def list_started_since(self, user_id: int, *, since: datetime) -> Sequence[TimeSession]:
        """Sessions with started_at >= since, newest first."""
        raise NotImplementedError

    def list_for_report(
        self,
        *,
        start: datetime,
        end: datetime,
        user_id: Optional[int] = None,
    ) -> Sequence[SessionReportRow]:
        raise NotImplementedError
