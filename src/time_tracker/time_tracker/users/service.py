from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import Identity, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    role: Role


class AuthService:
    """Use case: log in by picking a name; admins also need their password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, user_id: int, password: Optional[str] = None) -> SessionUser:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Unknown or inactive user")

        if user.role.is_admin:
            if not password:
                raise AuthenticationError("Password required for administrators")
            try:
                ok = check_password_hash(user.password_hash, password)
            except (TypeError, ValueError):
                # placeholder or corrupted hash values
                ok = False
            if not ok:
                logger.warning("Failed admin login for user_id=%s", user_id)
                raise AuthenticationError("Invalid credentials")

        logger.info("User %s logged in (role=%s)", user.user_id, user.role.value)
        return SessionUser(user_id=user.user_id, name=user.name, role=user.role)


class UserService:
    """Use case: user directory for the login picker and admin views."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_active(self) -> list[User]:
        return list(self._users.list_active())

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def deactivate(self, identity: Identity, user_id: int) -> None:
        if not identity.is_admin:
            raise AuthorizationError("Administrator access required")
        if identity.user_id == user_id:
            raise ValidationError("You cannot deactivate your own account")

        self.get(user_id)
        if not self._users.set_active(user_id, is_active=False):
            raise ValidationError("Deactivation failed")
        logger.info("User %s deactivated by %s", user_id, identity.user_id)
