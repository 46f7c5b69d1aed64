from flask import Blueprint, current_app, jsonify, request

from ..prayers import prayer_timeline, prayers_by_date
from ..utils.data_loader import get_state
from ..utils.meeting_dates import closest_meeting_date

URL_PREFIX = "/prayers"
bp = Blueprint("prayers", __name__)


@bp.get("/")
def by_date():
    app = current_app
    state = get_state(app)
    date = request.args.get("date", "").strip() or closest_meeting_date(
        state.meeting_dates, tz_name=app.config.get("TZ")
    )
    with state.lock:
        grouped = prayers_by_date(state, date)
    return jsonify({"date": date, "groups": grouped})


@bp.get("/members")
def by_member():
    state = get_state(current_app)
    query = request.args.get("q", "")
    with state.lock:
        timeline = prayer_timeline(state, query)
    current_app.logger.debug("Prayer timeline requested", extra={"query": query, "members": len(timeline)})
    return jsonify({"query": query, "members": timeline})
