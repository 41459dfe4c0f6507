from __future__ import annotations

from ..core.enums import Role
from .model import TaskCategory
from .repository import CategoryRepository


class CategoryService:
    """Use case: the category picker for a role."""

    def __init__(self, categories: CategoryRepository):
        self._categories = categories

    def list_for_role(self, role: Role) -> list[TaskCategory]:
        return list(self._categories.list_active_for_role(role))
