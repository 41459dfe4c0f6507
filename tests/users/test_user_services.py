from __future__ import annotations

from dataclasses import replace

import pytest
from werkzeug.security import generate_password_hash

from src.time_tracker.time_tracker.categories.service import CategoryService
from src.time_tracker.time_tracker.core.enums import Role
from src.time_tracker.time_tracker.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.time_tracker.time_tracker.users.service import AuthService, UserService


def test_regular_user_logs_in_without_password(users_repo):
    s_user = AuthService(users_repo).authenticate(1)
    assert (s_user.user_id, s_user.role) == (1, Role.MANAGEMENT)


def test_admin_requires_correct_password(users_repo):
    users_repo.by_id[9] = replace(users_repo.by_id[9], password_hash=generate_password_hash("s3cret-pass"))
    auth = AuthService(users_repo)

    with pytest.raises(AuthenticationError):
        auth.authenticate(9)
    with pytest.raises(AuthenticationError):
        auth.authenticate(9, "wrong")

    assert auth.authenticate(9, "s3cret-pass").role == Role.ADMIN


def test_admin_with_placeholder_hash_cannot_log_in(users_repo):
    users_repo.by_id[9] = replace(users_repo.by_id[9], password_hash="CHANGE_ME")
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate(9, "CHANGE_ME")


def test_inactive_or_unknown_user_cannot_log_in(users_repo):
    users_repo.set_active(2, is_active=False)
    auth = AuthService(users_repo)

    with pytest.raises(AuthenticationError):
        auth.authenticate(2)
    with pytest.raises(AuthenticationError):
        auth.authenticate(404)


def test_deactivate_keeps_user_but_hides_it(users_repo, admin):
    svc = UserService(users_repo)
    svc.deactivate(admin, 2)

    assert users_repo.get_by_id(2).is_active is False
    assert [u.user_id for u in svc.list_active()] == [9, 1]


def test_deactivate_rules(users_repo, admin, manon):
    svc = UserService(users_repo)

    with pytest.raises(AuthorizationError):
        svc.deactivate(manon, 2)
    with pytest.raises(ValidationError):
        svc.deactivate(admin, admin.user_id)
    with pytest.raises(NotFoundError):
        svc.deactivate(admin, 404)


def test_categories_for_role_are_active_and_ordered(categories_repo):
    names = [c.name for c in CategoryService(categories_repo).list_for_role(Role.MANAGEMENT)]
    assert names == ["Emails", "Facturatie", "Overige taken"]
