from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class TaskCategory:
    """Domain entity: a task a user of a given role can time.

    ``requires_description`` marks the per-role "other tasks" bucket: every
    session on it must carry a non-blank description.
    """

    category_id: int
    role: Role
    name: str
    sort_order: int = 0
    is_active: bool = True
    requires_description: bool = False
