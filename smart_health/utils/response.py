from datetime import datetime, timezone

from flask import jsonify


def success(data=None, message="Success", status_code=200):
    """
    Standard success envelope: {success, message, data}
    """
    return jsonify({"success": True, "message": message, "data": data}), status_code


def error(message="Something went wrong", status_code=400, data=None):
    body = {
        "success": False,
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if data is not None:
        body["data"] = data
    return jsonify(body), status_code
