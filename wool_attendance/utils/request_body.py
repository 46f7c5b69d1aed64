from typing import Any, Dict, Optional

from flask import jsonify, request


def json_object() -> Optional[Dict[str, Any]]:
    """JSON object body of the current request.

    A missing or unparseable body reads as ``{}``; any other JSON value
    (array, string, number) gives ``None``.
    """
    body = request.get_json(silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def not_an_object():
    return jsonify({"ok": False, "error": "Request body must be a JSON object."}), 400
