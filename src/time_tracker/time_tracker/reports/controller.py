from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, parse_iso_date, to_local
from ..common.validators import require_int
from ..common.web import admin_required, identity_from_session, iso, json_api, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .service import REPORT_FIELDS, CategoryTotal


def _totals(rows: list[CategoryTotal]) -> list[dict]:
    return [{"category_id": t.category_id, "name": t.category_name, "seconds": t.seconds, "hms": t.hms} for t in rows]


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: str, field_name: str) -> date:
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None

    def _write_report_csv(*, rows: list[dict], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/history", methods=["GET"], endpoint="api_history")
    @login_required
    @json_api
    def api_history():
        identity = identity_from_session()
        summary = container.history_service.summary(identity.user_id)
        return jsonify(
            {
                "today": {"total_sec": summary.today_total, "by_category": _totals(summary.today_by_category)},
                "week": {"total_sec": summary.week_total, "by_category": _totals(summary.week_by_category)},
                "recent": [
                    {
                        "id": r.session_id,
                        "category_name": r.category_name,
                        "started_at": iso(r.started_at),
                        "ended_at": iso(r.ended_at),
                        "duration_sec": r.duration_sec,
                        "description": r.description,
                        "is_running": r.is_running,
                    }
                    for r in summary.recent
                ],
            }
        )

    @app.route("/admin/report.csv", methods=["GET"], endpoint="admin_report_csv")
    @admin_required
    @json_api
    def admin_report_csv():
        today = to_local(now_utc(), container.settings.tz).date()
        start_raw = request.args.get("start")
        end_raw = request.args.get("end")
        start = _parse_date(start_raw, "start") if start_raw else today - timedelta(days=today.weekday())
        end = _parse_date(end_raw, "end") if end_raw else today

        user_raw = request.args.get("user_id")
        user_id = require_int(user_raw, "user_id") if user_raw else None

        rows = container.report_service.build(start=start, end=end, user_id=user_id)
        filename = f"time_sessions_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(rows=rows, filename=filename)
