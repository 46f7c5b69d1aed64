# wool_attendance/routes/attendance.py
from flask import Blueprint, current_app, jsonify, request

from ..attendance import toggle_attendance
from ..errors import InvalidAttendanceError, UnknownMemberError
from ..models import ATTENDANCE_TYPES
from ..utils.data_loader import get_gateway, get_state
from ..utils.meeting_dates import closest_meeting_date, dates_in_month, group_names, parse_iso
from ..utils.request_body import json_object, not_an_object
from ..utils.stats import member_monthly_total

URL_PREFIX = "/attendance"
bp = Blueprint("attendance", __name__)


def _selected_month(dates) -> int:
    raw = request.args.get("month", "").strip()
    if raw.isdigit() and 1 <= int(raw) <= 12:
        return int(raw)
    current = closest_meeting_date(dates, tz_name=current_app.config.get("TZ"))
    return parse_iso(current).month if current else 1


@bp.get("/")
def matrix():
    app = current_app
    state = get_state(app)
    month = _selected_month(state.meeting_dates)
    group_filter = request.args.get("group", "all").strip() or "all"
    month_dates = dates_in_month(state.meeting_dates, month)

    with state.lock:
        members = [m for m in state.members if group_filter == "all" or m.group == group_filter]
        members.sort(key=lambda m: (m.group, m.name))

        rows = []
        for member in members:
            cells = {}
            for date in month_dates:
                record = state.find_record(member.id, date)
                cells[date] = {
                    t.value: {
                        "present": bool(record and record.has(t)),
                        "canceled": state.is_canceled(date, t),
                    }
                    for t in ATTENDANCE_TYPES
                }
            totals = {
                t.value: member_monthly_total(
                    state.attendance, state.meeting_status, member.id, t, month_dates
                )
                for t in ATTENDANCE_TYPES
            }
            rows.append({"member": member.to_dict(), "cells": cells, "totals": totals})
        groups = group_names(state.members)

    app.logger.debug(
        "Attendance matrix prepared",
        extra={"month": month, "group": group_filter, "members": len(rows)},
    )
    return jsonify(
        {
            "month": month,
            "group": group_filter,
            "groups": groups,
            "dates": month_dates,
            "types": [t.value for t in ATTENDANCE_TYPES],
            "rows": rows,
        }
    )


@bp.post("/toggle")
def toggle():
    app = current_app
    state = get_state(app)
    body = json_object()
    if body is None:
        return not_an_object()
    member_id = str(body.get("memberId", "")).strip()
    date = str(body.get("date", "")).strip()

    if date not in state.meeting_dates:
        return jsonify({"ok": False, "error": f"{date or 'date'} is not a meeting date."}), 400

    try:
        result = toggle_attendance(state, get_gateway(app), member_id, date, body.get("type"))
    except UnknownMemberError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 404
    except InvalidAttendanceError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400

    if result is None:
        return jsonify({"ok": False, "error": "This meeting was not held.", "canceled": True}), 409
    return jsonify({"ok": True, **result.to_dict()})
