import platform
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from smart_health.extensions import get_services

health_bp = Blueprint("health", __name__)


def _configured(flag: bool) -> str:
    return "configured" if flag else "missing"


@health_bp.route("/", methods=["GET"])
def index():
    from smart_health import __version__

    return jsonify({
        "name": "Smart Health Assistant Backend",
        "version": __version__,
        "endpoints": [
            "GET /api/health - Health check",
            "POST /api/auth/register - Create an account",
            "POST /api/reports/upload - Upload medical reports",
            "GET /api/reports/<id>/signed-url - Download link for a report",
            "POST /api/appointments - Request an appointment",
            "POST /api/plans/diet - AI diet plan",
            "POST /api/plans/exercise - AI exercise plan",
        ],
    })


@health_bp.route("/api/health", methods=["GET"])
def health_check():
    cfg = current_app.config
    services = get_services()

    has_firebase = bool(
        cfg.get("FIREBASE_SERVICE_ACCOUNT")
        or (cfg.get("FIREBASE_PROJECT_ID") and cfg.get("FIREBASE_CLIENT_EMAIL"))
    )
    return jsonify({
        "success": True,
        "message": "Backend server is healthy",
        "services": {
            "firebase": _configured(has_firebase),
            "supabase": _configured(services.storage.configured),
            "gemini": _configured(services.gemini.configured),
            "openai": _configured(services.openai.configured),
            "python": platform.python_version(),
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "deployment": cfg.get("DEPLOYMENT", "local"),
    })
