from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; deactivated users keep their sessions and are never deleted.
    """

    user_id: int
    name: str
    email: str
    role: Role
    password_hash: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as supplied by the session layer."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin
