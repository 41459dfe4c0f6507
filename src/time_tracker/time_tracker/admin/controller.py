from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_int
from ..common.web import admin_required, identity_from_session, iso, json_api
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/live", methods=["GET"], endpoint="admin_live")
    @admin_required
    @json_api
    def admin_live():
        entries = container.live_view_service.active_sessions()
        return jsonify(
            {
                "total_active": len(entries),
                "poll_interval_seconds": container.settings.poll_interval_seconds,
                "active_sessions": [
                    {
                        "id": e.session.session_id,
                        "started_at": iso(e.session.started_at),
                        "elapsed_sec": e.elapsed_sec,
                        "description": e.session.description,
                        "user": {"id": e.session.user_id, "name": e.session.user_name, "role": e.session.user_role.value},
                        "category": {"id": e.session.category_id, "name": e.session.category_name},
                    }
                    for e in entries
                ],
            }
        )

    @app.route("/api/admin/week", methods=["GET"], endpoint="admin_week")
    @admin_required
    @json_api
    def admin_week():
        user_raw = request.args.get("user_id")
        user_id = require_int(user_raw, "user_id") if user_raw else None
        view = container.week_view_service.build(user_id=user_id, week=request.args.get("week"))

        placements = {p.segment_id: p for p in view.placements}
        return jsonify(
            {
                "users": [{"id": u.user_id, "name": u.name, "role": u.role.value} for u in view.users],
                "selected_user": {"id": view.user.user_id, "name": view.user.name},
                "week": view.window.iso(),
                "days": [d.isoformat() for d in view.window.days],
                "slots": view.grid.slot_labels(),
                "poll_interval_seconds": container.settings.poll_interval_seconds,
                "segments": [
                    {
                        "id": s.id,
                        "session_id": s.session_id,
                        "day_index": s.day_index,
                        "start_min": s.start_min,
                        "end_min": s.end_min,
                        "category_id": s.category_id,
                        "category_name": s.category_name,
                        "description": s.description,
                        "row_start": placements[s.id].row_start,
                        "row_end": placements[s.id].row_end,
                        "visible": placements[s.id].visible,
                    }
                    for s in view.segments
                ],
            }
        )

    @app.route("/api/admin/users/<int:user_id>/deactivate", methods=["POST"], endpoint="admin_deactivate_user")
    @admin_required
    @json_api
    def admin_deactivate_user(user_id: int):
        container.user_service.deactivate(identity_from_session(), user_id)
        return jsonify({"success": True})
