from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TaskCategory
from .repository import CategoryRepository

CATEGORY_COLUMNS = "category_id, role, name, sort_order, is_active, requires_description"


def row_to_category(row: dict) -> TaskCategory:
    return TaskCategory(
        category_id=int(row["category_id"]),
        role=Role(row["role"]),
        name=row["name"],
        sort_order=int(row.get("sort_order") or 0),
        is_active=bool(row.get("is_active", True)),
        requires_description=bool(row.get("requires_description", False)),
    )


class MySQLCategoryRepository(CategoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, category_id: int) -> Optional[TaskCategory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {CATEGORY_COLUMNS} FROM task_categories WHERE category_id=%s", (category_id,))
            row = fetchone(cur)
            return row_to_category(row) if row else None

    def list_active_for_role(self, role: Role) -> Sequence[TaskCategory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {CATEGORY_COLUMNS}
                FROM task_categories
                WHERE role=%s AND is_active=1
                ORDER BY sort_order ASC, name ASC
                """,
                (role.value,),
            )
            return [row_to_category(r) for r in fetchall(cur)]
