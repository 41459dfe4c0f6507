from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..categories.model import TaskCategory
from ..categories.mysql_category_repository import CATEGORY_COLUMNS, row_to_category
from ..core.enums import Role
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_integrity_errors
from .model import LiveSessionRow, SessionReportRow, TimeSession
from .repository import SessionRepository, SessionTransaction

_SESSION_COLUMNS = """
    ts.session_id, ts.user_id, ts.category_id, ts.started_at, ts.ended_at,
    ts.duration_sec, ts.description, c.name AS category_name
"""


def _to_session(r: dict) -> TimeSession:
    return TimeSession(
        session_id=int(r["session_id"]),
        user_id=int(r["user_id"]),
        category_id=int(r["category_id"]),
        started_at=r["started_at"],
        ended_at=r.get("ended_at"),
        duration_sec=int(r["duration_sec"]) if r.get("duration_sec") is not None else None,
        description=r.get("description"),
        category_name=r.get("category_name"),
    )


class _MySQLSessionTransaction(SessionTransaction):
    """Bound to one open cursor; the caller's db_cursor block commits."""

    def __init__(self, cur, user_id: int):
        self._cur = cur
        self.user_id = user_id

    def get_category(self, category_id: int) -> Optional[TaskCategory]:
        self._cur.execute(
            f"SELECT {CATEGORY_COLUMNS} FROM task_categories WHERE category_id=%s",
            (category_id,),
        )
        row = fetchone(self._cur)
        return row_to_category(row) if row else None

    def find_open(self) -> Optional[TimeSession]:
        self._cur.execute(
            f"""
            SELECT {_SESSION_COLUMNS}
            FROM time_sessions ts
            JOIN task_categories c ON c.category_id = ts.category_id
            WHERE ts.user_id=%s AND ts.ended_at IS NULL
            ORDER BY ts.started_at DESC
            LIMIT 1
            FOR UPDATE
            """,
            (self.user_id,),
        )
        row = fetchone(self._cur)
        return _to_session(row) if row else None

    def close(self, session_id: int, *, ended_at: datetime, duration_sec: int) -> bool:
        self._cur.execute(
            """
            UPDATE time_sessions
            SET ended_at=%s, duration_sec=%s
            WHERE session_id=%s AND user_id=%s AND ended_at IS NULL
            """,
            (ended_at, int(duration_sec), int(session_id), self.user_id),
        )
        return self._cur.rowcount > 0

    def create(self, *, category_id: int, started_at: datetime, description: Optional[str]) -> int:
        with translate_integrity_errors("Another session was opened concurrently"):
            self._cur.execute(
                """
                INSERT INTO time_sessions(user_id, category_id, started_at, description)
                VALUES(%s,%s,%s,%s)
                """,
                (self.user_id, int(category_id), started_at, description),
            )
        return int(self._cur.lastrowid)


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self, user_id: int) -> Iterator[SessionTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the user serializes lifecycle transactions per user.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (user_id,))
            if not fetchone(cur):
                raise NotFoundError("User not found")
            yield _MySQLSessionTransaction(cur, int(user_id))

    def get_open_for_user(self, user_id: int) -> Optional[TimeSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM time_sessions ts
                JOIN task_categories c ON c.category_id = ts.category_id
                WHERE ts.user_id=%s AND ts.ended_at IS NULL
                ORDER BY ts.started_at DESC
                LIMIT 1
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_open(self) -> Sequence[LiveSessionRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ts.session_id, ts.user_id, u.name AS user_name, u.role AS user_role,
                       ts.category_id, c.name AS category_name, ts.started_at, ts.description
                FROM time_sessions ts
                JOIN users u ON u.user_id = ts.user_id
                JOIN task_categories c ON c.category_id = ts.category_id
                WHERE ts.ended_at IS NULL
                ORDER BY ts.started_at ASC
                """
            )
            return [
                LiveSessionRow(
                    session_id=int(r["session_id"]),
                    user_id=int(r["user_id"]),
                    user_name=r["user_name"],
                    user_role=Role(r["user_role"]),
                    category_id=int(r["category_id"]),
                    category_name=r["category_name"],
                    started_at=r["started_at"],
                    description=r.get("description"),
                )
                for r in fetchall(cur)
            ]

    def list_overlapping(self, user_id: int, *, start: datetime, end: datetime) -> Sequence[TimeSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM time_sessions ts
                JOIN task_categories c ON c.category_id = ts.category_id
                WHERE ts.user_id=%s
                  AND ts.started_at < %s
                  AND (ts.ended_at >= %s OR ts.ended_at IS NULL)
                ORDER BY ts.started_at ASC
                """,
                (user_id, end, start),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_started_since(self, user_id: int, *, since: datetime) -> Sequence[TimeSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM time_sessions ts
                JOIN task_categories c ON c.category_id = ts.category_id
                WHERE ts.user_id=%s AND ts.started_at >= %s
                ORDER BY ts.started_at DESC
                """,
                (user_id, since),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_report(
        self,
        *,
        start: datetime,
        end: datetime,
        user_id: Optional[int] = None,
    ) -> Sequence[SessionReportRow]:
        clauses = ["ts.started_at >= %s", "ts.started_at < %s"]
        params: list[object] = [start, end]

        if user_id is not None:
            clauses.append("ts.user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ts.session_id, ts.user_id, u.name AS user_name,
                       ts.category_id, c.name AS category_name,
                       ts.started_at, ts.ended_at, ts.duration_sec, ts.description
                FROM time_sessions ts
                JOIN users u ON u.user_id = ts.user_id
                JOIN task_categories c ON c.category_id = ts.category_id
                WHERE {where}
                ORDER BY ts.started_at ASC, u.name ASC
                """,
                tuple(params),
            )
            return [
                SessionReportRow(
                    session_id=int(r["session_id"]),
                    user_id=int(r["user_id"]),
                    user_name=r["user_name"],
                    category_id=int(r["category_id"]),
                    category_name=r["category_name"],
                    started_at=r["started_at"],
                    ended_at=r.get("ended_at"),
                    duration_sec=int(r["duration_sec"]) if r.get("duration_sec") is not None else None,
                    description=r.get("description"),
                )
                for r in fetchall(cur)
            ]
