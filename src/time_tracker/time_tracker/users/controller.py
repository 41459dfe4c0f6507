from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.validators import require_int
from ..common.web import fail, identity_from_session, json_api, json_body, login_required
from ..container import Container
from ..core.exceptions import AuthenticationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/users", methods=["GET"], endpoint="api_users")
    @json_api
    def api_users():
        users = container.user_service.list_active()
        return jsonify([{"id": u.user_id, "name": u.name, "role": u.role.value} for u in users])

    @app.route("/login", methods=["POST"], endpoint="login")
    @json_api
    def login():
        data = json_body()
        user_id = require_int(data.get("user_id"), "User")
        password = data.get("password") or None

        try:
            s_user = container.auth_service.authenticate(user_id, password)
        except AuthenticationError as e:
            return fail(str(e), 401)

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        return jsonify({"success": True, "user": {"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value}})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/me", methods=["GET"], endpoint="api_me")
    @login_required
    def api_me():
        identity = identity_from_session()
        return jsonify({"id": identity.user_id, "name": session.get("name"), "role": identity.role.value})
