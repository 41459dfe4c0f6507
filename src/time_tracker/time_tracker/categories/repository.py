from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import TaskCategory


class CategoryRepository(Protocol):
    def get_by_id(self, category_id: int) -> Optional[TaskCategory]:
        raise NotImplementedError

    def list_active_for_role(self, role: Role) -> Sequence[TaskCategory]:
        """Active categories ordered by sort_order, then name."""
        raise NotImplementedError
