from __future__ import annotations

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from .admin.service import LiveViewService
from .calendar.segmentation import DisplayGrid
from .calendar.service import WeekViewService
from .categories.mysql_category_repository import MySQLCategoryRepository
from .categories.repository import CategoryRepository
from .categories.service import CategoryService
from .core.constants import (
    DEFAULT_DISPLAY_END_MINUTE,
    DEFAULT_DISPLAY_START_MINUTE,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_SLOT_MINUTES,
    DEFAULT_TIMEZONE,
)
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import HistoryService, SessionReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionLifecycleService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class AppSettings:
    """Core parameters that come from configuration rather than code."""

    timezone: str = DEFAULT_TIMEZONE
    display_start_minute: int = DEFAULT_DISPLAY_START_MINUTE
    display_end_minute: int = DEFAULT_DISPLAY_END_MINUTE
    slot_minutes: int = DEFAULT_SLOT_MINUTES
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS

    @classmethod
    def from_module(cls, settings) -> "AppSettings":
        return cls(
            timezone=str(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
            display_start_minute=int(getattr(settings, "DISPLAY_START_MINUTE", DEFAULT_DISPLAY_START_MINUTE)),
            display_end_minute=int(getattr(settings, "DISPLAY_END_MINUTE", DEFAULT_DISPLAY_END_MINUTE)),
            slot_minutes=int(getattr(settings, "SLOT_MINUTES", DEFAULT_SLOT_MINUTES)),
            poll_interval_seconds=int(getattr(settings, "POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS)),
        )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def grid(self) -> DisplayGrid:
        return DisplayGrid(
            start_min=self.display_start_minute,
            end_min=self.display_end_minute,
            slot_min=self.slot_minutes,
        )


@dataclass(frozen=True)
class Container:
    settings: AppSettings

    users_repo: UserRepository
    categories_repo: CategoryRepository
    sessions_repo: SessionRepository

    auth_service: AuthService
    user_service: UserService
    category_service: CategoryService
    lifecycle_service: SessionLifecycleService
    history_service: HistoryService
    week_view_service: WeekViewService
    live_view_service: LiveViewService
    report_service: SessionReportService

    conn: DatabaseConnection | None = field(default=None)


def wire(
    *,
    users_repo: UserRepository,
    categories_repo: CategoryRepository,
    sessions_repo: SessionRepository,
    settings: AppSettings | None = None,
    conn: DatabaseConnection | None = None,
) -> Container:
    """Build services over the given repositories."""
    settings = settings or AppSettings()
    tz = settings.tz

    return Container(
        settings=settings,
        users_repo=users_repo,
        categories_repo=categories_repo,
        sessions_repo=sessions_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        category_service=CategoryService(categories_repo),
        lifecycle_service=SessionLifecycleService(sessions_repo),
        history_service=HistoryService(sessions_repo, tz=tz),
        week_view_service=WeekViewService(sessions_repo, users_repo, tz=tz, grid=settings.grid()),
        live_view_service=LiveViewService(sessions_repo),
        report_service=SessionReportService(sessions_repo, tz=tz),
        conn=conn,
    )


def build_container(*, db_config: dict, settings: AppSettings | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        categories_repo=MySQLCategoryRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        settings=settings,
        conn=conn,
    )
