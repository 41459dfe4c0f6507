from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

from ..common.datetime_utils import now_utc, seconds_between
from ..common.validators import require_int
from ..common.web import identity_from_session, iso, json_api, json_body, login_required
from ..container import Container
from .model import TimeSession


def session_to_dict(s: Optional[TimeSession]) -> Optional[dict]:
    if s is None:
        return None
    return {
        "id": s.session_id,
        "category_id": s.category_id,
        "category_name": s.category_name,
        "started_at": iso(s.started_at),
        "ended_at": iso(s.ended_at),
        "duration_sec": s.duration_sec,
        "description": s.description,
        "is_running": s.is_open,
    }


def register(app: Flask, container: Container) -> None:
    lifecycle = container.lifecycle_service

    def _category_and_description() -> tuple[int, Optional[str]]:
        data = json_body()
        category_id = require_int(data.get("category_id"), "Category")
        description = data.get("description")
        return category_id, description if isinstance(description, str) else None

    @app.route("/api/tracker", methods=["GET"], endpoint="api_tracker")
    @login_required
    @json_api
    def api_tracker():
        identity = identity_from_session()
        categories = container.category_service.list_for_role(identity.role)
        open_session = lifecycle.current(identity)
        elapsed = seconds_between(open_session.started_at, now_utc()) if open_session else 0

        return jsonify(
            {
                "categories": [
                    {"id": c.category_id, "name": c.name, "requires_description": c.requires_description}
                    for c in categories
                ],
                "open_session": session_to_dict(open_session),
                "elapsed_sec": elapsed,
                "poll_interval_seconds": container.settings.poll_interval_seconds,
            }
        )

    @app.route("/api/tracker/start", methods=["POST"], endpoint="api_tracker_start")
    @login_required
    @json_api
    def api_tracker_start():
        category_id, description = _category_and_description()
        s = lifecycle.select(identity_from_session(), category_id, description)
        return jsonify({"success": True, "session": session_to_dict(s)})

    @app.route("/api/tracker/switch", methods=["POST"], endpoint="api_tracker_switch")
    @login_required
    @json_api
    def api_tracker_switch():
        category_id, description = _category_and_description()
        s = lifecycle.switch_to(identity_from_session(), category_id, description)
        return jsonify({"success": True, "session": session_to_dict(s)})

    @app.route("/api/tracker/stop", methods=["POST"], endpoint="api_tracker_stop")
    @login_required
    @json_api
    def api_tracker_stop():
        closed = lifecycle.stop(identity_from_session())
        return jsonify({"success": True, "stopped": session_to_dict(closed)})
