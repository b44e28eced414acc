from flask import Blueprint, request

from smart_health.extensions import get_services
from smart_health.models.user import PROFILE_FIELDS
from smart_health.services.profile_service import calculate_bmi, is_profile_complete, validate_health_profile
from smart_health.utils.request_data import json_body
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")

_NUMERIC = {"age": int, "height": float, "weight": float, "bloodSugar": float}


def _clean_profile(data: dict) -> dict:
    profile = {}
    for key in PROFILE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, str):
            value = value.strip()
        if value == "":
            value = None
        if value is not None and key in _NUMERIC:
            value = _NUMERIC[key](value)
        profile[key] = value
    return profile


@profile_bp.route("", methods=["GET"])
@firebase_token_required()
def get_profile():
    user = get_services().store.get_user(request.current_uid)
    if not user:
        return error("Profile not found", 404)
    return success(user.to_json(), "Profile loaded")


@profile_bp.route("", methods=["PUT"])
@firebase_token_required()
def save_profile():
    data = json_body()

    errors = validate_health_profile(data)
    if errors:
        return error("Validation failed", 400, {"errors": errors})

    try:
        profile = _clean_profile(data)
    except (TypeError, ValueError):
        return error("Validation failed", 400, {"errors": ["Numeric fields must be numbers"]})

    bmi, bmi_status = calculate_bmi(profile.get("height"), profile.get("weight"))
    profile["bmi"] = bmi
    profile["bmiStatus"] = bmi_status

    get_services().store.merge_user(request.current_uid, profile)
    return success({"bmi": bmi, "bmiStatus": bmi_status}, "Health profile saved")


@profile_bp.route("/complete", methods=["GET"])
@firebase_token_required()
def profile_complete():
    user = get_services().store.get_user(request.current_uid)
    return success({"complete": is_profile_complete(user)})
