from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.time_tracker.time_tracker.categories.model import TaskCategory
from src.time_tracker.time_tracker.core.enums import Role
from src.time_tracker.time_tracker.core.exceptions import ConflictError, NotFoundError
from src.time_tracker.time_tracker.sessions.model import LiveSessionRow, SessionReportRow, TimeSession
from src.time_tracker.time_tracker.users.model import Identity, User


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(user_id)

    def list_active(self):
        return sorted((u for u in self.by_id.values() if u.is_active), key=lambda u: u.name)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        user = self.by_id.get(user_id)
        if not user:
            return False
        self.by_id[user_id] = replace(user, is_active=is_active)
        return True


class InMemoryCategories:
    def __init__(self, categories: list[TaskCategory]):
        self.by_id = {c.category_id: c for c in categories}

    def get_by_id(self, category_id: int) -> Optional[TaskCategory]:
        return self.by_id.get(category_id)

    def list_active_for_role(self, role: Role):
        items = [c for c in self.by_id.values() if c.role == role and c.is_active]
        return sorted(items, key=lambda c: (c.sort_order, c.name))


class _Tx:
    def __init__(self, store: "InMemorySessions", user_id: int):
        self._store = store
        self.user_id = user_id

    def get_category(self, category_id: int):
        return self._store.categories.get_by_id(category_id)

    def find_open(self):
        return self._store.get_open_for_user(self.user_id)

    def close(self, session_id: int, *, ended_at: datetime, duration_sec: int) -> bool:
        s = self._store.rows.get(session_id)
        if not s or s.user_id != self.user_id or s.ended_at is not None:
            return False
        self._store.rows[session_id] = replace(s, ended_at=ended_at, duration_sec=duration_sec)
        self._store.writes.append(("close", session_id))
        return True

    def create(self, *, category_id: int, started_at: datetime, description):
        if self._store.get_open_for_user(self.user_id) is not None:
            raise ConflictError("Another session was opened concurrently")
        self._store.next_id += 1
        sid = self._store.next_id
        cat = self._store.categories.get_by_id(category_id)
        self._store.rows[sid] = TimeSession(
            session_id=sid,
            user_id=self.user_id,
            category_id=category_id,
            started_at=started_at,
            description=description,
            category_name=cat.name if cat else None,
        )
        self._store.writes.append(("create", sid))
        return sid


class InMemorySessions:
    """Session store with per-user locking and all-or-nothing transactions."""

    def __init__(self, categories: InMemoryCategories, users: InMemoryUsers):
        self.categories = categories
        self.users = users
        self.rows: dict[int, TimeSession] = {}
        self.next_id = 0
        self.writes: list[tuple[str, int]] = []
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(user_id, threading.Lock())

    @contextmanager
    def transaction(self, user_id: int):
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User not found")
        with self._lock_for(user_id):
            snapshot = (dict(self.rows), self.next_id, list(self.writes))
            try:
                yield _Tx(self, user_id)
            except Exception:
                self.rows, self.next_id, self.writes = snapshot
                raise

    def add(self, session: TimeSession) -> TimeSession:
        cat = self.categories.get_by_id(session.category_id)
        if cat and session.category_name is None:
            session = replace(session, category_name=cat.name)
        self.rows[session.session_id] = session
        self.next_id = max(self.next_id, session.session_id)
        return session

    def open_sessions(self, user_id: int) -> list[TimeSession]:
        return [s for s in self.rows.values() if s.user_id == user_id and s.ended_at is None]

    def get_open_for_user(self, user_id: int):
        items = self.open_sessions(user_id)
        return max(items, key=lambda s: s.started_at) if items else None

    def list_open(self):
        out = []
        for s in sorted(self.rows.values(), key=lambda s: s.started_at):
            if s.ended_at is not None:
                continue
            user = self.users.get_by_id(s.user_id)
            out.append(
                LiveSessionRow(
                    session_id=s.session_id,
                    user_id=s.user_id,
                    user_name=user.name,
                    user_role=user.role,
                    category_id=s.category_id,
                    category_name=s.category_name or "",
                    started_at=s.started_at,
                    description=s.description,
                )
            )
        return out

    def list_overlapping(self, user_id: int, *, start: datetime, end: datetime):
        items = [
            s
            for s in self.rows.values()
            if s.user_id == user_id and s.started_at < end and (s.ended_at is None or s.ended_at >= start)
        ]
        return sorted(items, key=lambda s: s.started_at)

    def list_started_since(self, user_id: int, *, since: datetime):
        items = [s for s in self.rows.values() if s.user_id == user_id and s.started_at >= since]
        return sorted(items, key=lambda s: s.started_at, reverse=True)

    def list_for_report(self, *, start: datetime, end: datetime, user_id=None):
        out = []
        for s in sorted(self.rows.values(), key=lambda s: s.started_at):
            if not (start <= s.started_at < end):
                continue
            if user_id is not None and s.user_id != user_id:
                continue
            out.append(
                SessionReportRow(
                    session_id=s.session_id,
                    user_id=s.user_id,
                    user_name=self.users.get_by_id(s.user_id).name,
                    category_id=s.category_id,
                    category_name=s.category_name or "",
                    started_at=s.started_at,
                    ended_at=s.ended_at,
                    duration_sec=s.duration_sec,
                    description=s.description,
                )
            )
        return out


EMAILS = TaskCategory(category_id=1, role=Role.MANAGEMENT, name="Emails", sort_order=1)
FACTURATIE = TaskCategory(category_id=2, role=Role.MANAGEMENT, name="Facturatie", sort_order=3)
OVERIGE = TaskCategory(
    category_id=3, role=Role.MANAGEMENT, name="Overige taken", sort_order=9, requires_description=True
)
RETIRED = TaskCategory(category_id=4, role=Role.MANAGEMENT, name="DG", sort_order=5, is_active=False)
BETALINGEN = TaskCategory(category_id=5, role=Role.ACCOUNTING, name="Inkomende betalingen verwerken", sort_order=1)


@pytest.fixture
def fixed_now() -> datetime:
    # Naive UTC; 10:15 in Brussels (CET).
    return datetime(2026, 2, 4, 9, 15, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(user_id=1, name="Manon", email="manon@example.com", role=Role.MANAGEMENT),
            User(user_id=2, name="Stephanie", email="stephanie@example.com", role=Role.ACCOUNTING),
            User(user_id=9, name="Admin", email="admin@example.com", role=Role.ADMIN, password_hash=""),
        ]
    )


@pytest.fixture
def categories_repo() -> InMemoryCategories:
    return InMemoryCategories([EMAILS, FACTURATIE, OVERIGE, RETIRED, BETALINGEN])


@pytest.fixture
def sessions_repo(categories_repo, users_repo) -> InMemorySessions:
    return InMemorySessions(categories_repo, users_repo)


@pytest.fixture
def manon() -> Identity:
    return Identity(user_id=1, role=Role.MANAGEMENT)


@pytest.fixture
def admin() -> Identity:
    return Identity(user_id=9, role=Role.ADMIN)
