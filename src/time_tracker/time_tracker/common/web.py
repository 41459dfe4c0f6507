"""Flask glue shared by the controllers: session identity, guards, error mapping."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..users.model import Identity
from .datetime_utils import as_utc

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


def identity_from_session() -> Optional[Identity]:
    user_id = session.get("user_id")
    role = session.get("role")
    if user_id is None or not role:
        return None
    try:
        return Identity(user_id=int(user_id), role=Role(role))
    except ValueError:
        return None


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def error_response(e: DomainError):
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(e, cls):
            return fail(str(e), status)
    return fail(str(e), 400)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if identity_from_session() is None:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = identity_from_session()
        if identity is None:
            return fail("Please log in to continue", 401)
        if not identity.is_admin:
            return fail("Administrator access required", 403)
        return view(*args, **kwargs)

    return wrapper


def json_api(view):
    """Map domain errors to JSON responses; log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def iso(value: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with a trailing Z, or None."""
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")
