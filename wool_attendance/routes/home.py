# wool_attendance/routes/home.py
from flask import Blueprint, current_app, jsonify

from ..utils.data_loader import get_state
from ..utils.meeting_dates import closest_meeting_date, group_names
from ..utils.stats import attendance_totals, group_stats, weekly_stats

URL_PREFIX = "/home"
bp = Blueprint("home", __name__)


@bp.get("/")
def index():
    app = current_app
    app.logger.debug("Rendering dashboard home route")
    state = get_state(app)

    with state.lock:
        members = list(state.members)
        records = list(state.attendance)

    weekly = weekly_stats(records, state.meeting_dates)
    groups = group_stats(members, records)

    app.logger.debug(
        "Dashboard data prepared",
        extra={"records": len(records), "groups": len(groups), "source": state.data_source},
    )
    return jsonify(
        {
            "totals": attendance_totals(records),
            "weekly": [w.to_dict() for w in weekly],
            "groups": [g.to_dict() for g in groups],
            "groupNames": group_names(members),
            "currentDate": closest_meeting_date(state.meeting_dates, tz_name=app.config.get("TZ")),
            **state.summary(),
        }
    )
