# wool_attendance/routes/settings.py
from flask import Blueprint, current_app, jsonify, request

from ..utils.data_loader import get_gateway, get_settings, get_state, load_state
from ..utils.request_body import json_object, not_an_object

URL_PREFIX = "/settings"
bp = Blueprint("settings", __name__)


@bp.get("/")
def show():
    state = get_state(current_app)
    return jsonify({"scriptUrl": get_settings(current_app).get_script_url(), **state.summary()})


@bp.post("/")
def save():
    app = current_app
    body = json_object()
    if body is None:
        return not_an_object()
    url = str(body.get("scriptUrl", "")).strip()
    if url and not url.lower().startswith(("http://", "https://")):
        return jsonify({"ok": False, "error": "The URL must start with http:// or https://."}), 400

    get_settings(app).set_script_url(url)
    app.logger.info("Endpoint URL saved", extra={"remote_addr": request.remote_addr})
    return jsonify({"ok": True, "scriptUrl": url})


@bp.delete("/")
def clear():
    get_settings(current_app).clear_script_url()
    return jsonify({"ok": True, "scriptUrl": ""})


@bp.post("/test")
def test_connection():
    app = current_app
    app.logger.info("Connection test requested", extra={"remote_addr": request.remote_addr})
    result = get_gateway(app).test_connection()
    return jsonify(result), 200 if result.get("ok") else 502


@bp.post("/reload")
def reload_data():
    app = current_app
    app.logger.info("Manual reload requested", extra={"remote_addr": request.remote_addr})
    state = load_state(app)
    return jsonify({"ok": state.last_error is None, **state.summary()})
