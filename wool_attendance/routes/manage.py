# wool_attendance/routes/manage.py
from flask import Blueprint, current_app, jsonify, request

from ..attendance import add_member, remove_member, update_member
from ..errors import AttendanceError, UnknownMemberError
from ..models import ATTENDANCE_TYPES
from ..utils.data_loader import get_gateway, get_state
from ..utils.meeting_dates import closest_meeting_date, group_names
from ..utils.request_body import json_object, not_an_object
from ..utils.stats import member_attendance_map

URL_PREFIX = "/manage"
bp = Blueprint("manage", __name__)

SORT_KEYS = {"name", "group", "phoneNumber", "role", "status"}

# camelCase request keys -> Member attributes
FIELD_NAMES = {
    "name": "name",
    "group": "group",
    "phoneNumber": "phone_number",
    "role": "role",
    "status": "status",
    "specialNotes": "special_notes",
    "latestPrayerRequest": "latest_prayer_request",
}


@bp.get("/members")
def list_members():
    state = get_state(current_app)
    sort_key = request.args.get("sort", "")
    descending = request.args.get("direction", "asc").lower() == "desc"

    with state.lock:
        members = [m.to_dict() for m in state.members]
        groups = group_names(state.members)

    if sort_key in SORT_KEYS:
        members.sort(key=lambda m: m.get(sort_key) or "", reverse=descending)

    return jsonify({"members": members, "groups": groups})


@bp.post("/members")
def create_member():
    app = current_app
    body = json_object()
    if body is None:
        return not_an_object()
    try:
        member = add_member(
            get_state(app),
            get_gateway(app),
            name=body.get("name", ""),
            group=body.get("group", ""),
            phone_number=body.get("phoneNumber", ""),
        )
    except AttendanceError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "member": member.to_dict()}), 201


@bp.get("/members/<member_id>")
def member_detail(member_id: str):
    state = get_state(current_app)
    with state.lock:
        member = state.member_by_id(member_id)
        if member is None:
            return jsonify({"ok": False, "error": f"Unknown member: {member_id}"}), 404
        attendance = member_attendance_map(member_id, state.attendance)
        prayers = sorted(
            (p.to_dict() for p in state.prayers if p.member_id == member_id),
            key=lambda p: p["date"],
            reverse=True,
        )
    return jsonify({"member": member.to_dict(), "attendance": attendance, "prayers": prayers})


@bp.patch("/members/<member_id>")
def edit_member(member_id: str):
    body = json_object()
    if body is None:
        return not_an_object()
    fields = {FIELD_NAMES[k]: v for k, v in body.items() if k in FIELD_NAMES}
    if not fields:
        return jsonify({"ok": False, "error": "Nothing to update."}), 400

    try:
        member = update_member(get_state(current_app), member_id, **fields)
    except UnknownMemberError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 404
    except AttendanceError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "member": member.to_dict()})


@bp.delete("/members/<member_id>")
def delete_member(member_id: str):
    app = current_app
    if not app.config.get("ALLOW_MEMBER_REMOVAL", False):
        app.logger.warning("Member removal blocked", extra={"member_id": member_id})
        return jsonify({"ok": False, "error": "Member removal is disabled."}), 403
    try:
        member = remove_member(get_state(app), member_id)
    except UnknownMemberError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 404
    return jsonify({"ok": True, "member": member.to_dict()})


@bp.get("/attendance")
def attendance_for_date():
    app = current_app
    state = get_state(app)
    date = request.args.get("date", "").strip() or closest_meeting_date(
        state.meeting_dates, tz_name=app.config.get("TZ")
    )
    group_filter = request.args.get("group", "all").strip() or "all"

    with state.lock:
        rows = []
        for member in state.members:
            if group_filter != "all" and member.group != group_filter:
                continue
            record = state.find_record(member.id, date)
            rows.append(
                {
                    "member": member.to_dict(),
                    "types": [t.value for t in record.types] if record else [],
                }
            )
        canceled = [t.value for t in ATTENDANCE_TYPES if state.is_canceled(date, t)]

    return jsonify({"date": date, "group": group_filter, "canceled": canceled, "rows": rows})
