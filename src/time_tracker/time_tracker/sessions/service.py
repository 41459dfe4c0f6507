from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..common.datetime_utils import now_utc, seconds_between, to_naive_utc
from ..common.validators import optional_trimmed
from ..core.enums import TrackerState
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Identity
from .model import TimeSession
from .repository import SessionRepository, SessionTransaction

logger = logging.getLogger(__name__)


class _Intent(str, Enum):
    START = "start"  # create-or-switch, never onto the running category
    NEW = "new"  # must be idle
    SWITCH = "switch"  # must be running on another category
    SELECT = "select"  # UI click: new, switch, or no-op on the running category


def _require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise AuthenticationError("Not authenticated")
    return identity


class SessionLifecycleService:
    """Start, switch and stop timers while keeping at most one open session per user.

    Every mutation runs in one store transaction scoped to the user: the open
    session is read, closed and replaced together. A uniqueness violation from
    the store (two concurrent starts) is retried once before surfacing as
    ConflictError.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        conflict_retries: int = 1,
    ):
        self._sessions = sessions
        self._clock = clock
        self._conflict_retries = int(conflict_retries)

    def current(self, identity: Optional[Identity]) -> Optional[TimeSession]:
        identity = _require_identity(identity)
        return self._sessions.get_open_for_user(identity.user_id)

    def state(self, identity: Optional[Identity]) -> TrackerState:
        return TrackerState.RUNNING if self.current(identity) else TrackerState.IDLE

    def start(
        self,
        identity: Optional[Identity],
        category_id: int,
        description: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimeSession:
        """Open a session on ``category_id``, closing the running one first.

        Restarting the running category is rejected so its session keeps its id.
        """
        return self._run(identity, category_id, description, now, _Intent.START)

    def start_new(
        self,
        identity: Optional[Identity],
        category_id: int,
        description: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimeSession:
        return self._run(identity, category_id, description, now, _Intent.NEW)

    def switch_to(
        self,
        identity: Optional[Identity],
        category_id: int,
        description: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimeSession:
        return self._run(identity, category_id, description, now, _Intent.SWITCH)

    def select(
        self,
        identity: Optional[Identity],
        category_id: int,
        description: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TimeSession:
        """Category click: start when idle, switch when running elsewhere.

        Selecting the running category returns the open session untouched.
        """
        return self._run(identity, category_id, description, now, _Intent.SELECT)

    def stop(self, identity: Optional[Identity], *, now: Optional[datetime] = None) -> Optional[TimeSession]:
        """Close the open session. Idempotent: returns None when already idle."""
        identity = _require_identity(identity)
        now = to_naive_utc(now) if now else self._clock()

        with self._sessions.transaction(identity.user_id) as tx:
            open_session = tx.find_open()
            if open_session is None:
                logger.debug("stop: user %s already idle", identity.user_id)
                return None
            closed = self._close(tx, open_session, now)

        logger.info(
            "Stopped session %s for user %s (%ss)",
            closed.session_id,
            identity.user_id,
            closed.duration_sec,
        )
        return closed

    def _run(
        self,
        identity: Optional[Identity],
        category_id: int,
        description: Optional[str],
        now: Optional[datetime],
        intent: _Intent,
    ) -> TimeSession:
        identity = _require_identity(identity)
        attempt = 0

        while True:
            attempt += 1
            at = to_naive_utc(now) if now else self._clock()
            try:
                return self._start_once(identity, int(category_id), description, at, intent)
            except ConflictError:
                if attempt > self._conflict_retries:
                    raise
                logger.warning("Concurrent start for user %s (attempt %s), retrying", identity.user_id, attempt)

    def _start_once(
        self,
        identity: Identity,
        category_id: int,
        description: Optional[str],
        now: datetime,
        intent: _Intent,
    ) -> TimeSession:
        with self._sessions.transaction(identity.user_id) as tx:
            category = tx.get_category(category_id)
            if category is None or not category.is_active:
                raise NotFoundError("Category not found")

            open_session = tx.find_open()

            if open_session is not None and open_session.category_id == category_id:
                if intent is _Intent.SELECT:
                    return open_session
                raise ValidationError("This category is already running")
            if intent is _Intent.NEW and open_session is not None:
                raise ValidationError("A timer is already running; switch or stop it first")
            if intent is _Intent.SWITCH and open_session is None:
                raise ValidationError("No running timer to switch from")

            text = optional_trimmed(description)
            if category.requires_description and not text:
                raise ValidationError(f"A description is required for '{category.name}'")

            started_at = now
            previous = None
            if open_session is not None:
                previous = self._close(tx, open_session, now)
                started_at = previous.ended_at

            session_id = tx.create(category_id=category_id, started_at=started_at, description=text)

        if previous is not None:
            logger.info(
                "User %s switched from category %s to %s (closed session %s, opened %s)",
                identity.user_id,
                previous.category_id,
                category_id,
                previous.session_id,
                session_id,
            )
        else:
            logger.info("User %s started category %s (session %s)", identity.user_id, category_id, session_id)

        return TimeSession(
            session_id=session_id,
            user_id=identity.user_id,
            category_id=category_id,
            started_at=started_at,
            description=text,
            category_name=category.name,
        )

    @staticmethod
    def _close(tx: SessionTransaction, open_session: TimeSession, now: datetime) -> TimeSession:
        # A clock behind started_at closes the session at its start with zero duration.
        ended_at = max(now, open_session.started_at)
        duration = seconds_between(open_session.started_at, ended_at)
        if not tx.close(open_session.session_id, ended_at=ended_at, duration_sec=duration):
            raise ConflictError("Session was closed concurrently")
        return TimeSession(
            session_id=open_session.session_id,
            user_id=open_session.user_id,
            category_id=open_session.category_id,
            started_at=open_session.started_at,
            ended_at=ended_at,
            duration_sec=duration,
            description=open_session.description,
            category_name=open_session.category_name,
        )
