from flask import Blueprint, request

from smart_health.extensions import get_services
from smart_health.models.health_reading import READING_TYPES, HealthReading
from smart_health.utils.request_data import InvalidField, json_body, text_field
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

reading_bp = Blueprint("health_readings", __name__, url_prefix="/api/health-readings")


class InvalidReading(ValueError):
    pass


def _number(data: dict, key: str, cast):
    value = data.get(key)
    if isinstance(value, bool):
        raise InvalidReading("Invalid reading")
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise InvalidReading("Invalid reading") from exc


def _reading_from_body(data: dict) -> HealthReading:
    reading_type = data.get("type")
    if not isinstance(reading_type, str) or reading_type not in READING_TYPES:
        raise InvalidReading("type must be 'bp' or 'sugar'")

    if reading_type == "bp":
        systolic = _number(data, "systolic", int)
        diastolic = _number(data, "diastolic", int)
        if not (50 <= systolic <= 300 and 30 <= diastolic <= 200):
            raise InvalidReading("Blood pressure reading out of range")
        return HealthReading(type="bp", systolic=systolic, diastolic=diastolic)

    value = _number(data, "value", float)
    if not 20 <= value <= 700:
        raise InvalidReading("Blood sugar reading out of range")
    try:
        sugar_type = text_field(data, "sugarType") or None
    except InvalidField as exc:
        raise InvalidReading(str(exc)) from exc
    return HealthReading(type="sugar", value=value, sugar_type=sugar_type)


@reading_bp.route("", methods=["POST"])
@firebase_token_required()
def add_reading():
    try:
        reading = _reading_from_body(json_body())
    except InvalidReading as exc:
        return error(str(exc), 400)

    reading = get_services().store.add_health_reading(request.current_uid, reading)
    return success(reading.to_json(), "Reading saved", 201)


@reading_bp.route("", methods=["GET"])
@firebase_token_required()
def list_readings():
    reading_type = request.args.get("type")
    if reading_type and reading_type not in READING_TYPES:
        return error("type must be 'bp' or 'sugar'", 400)
    readings = get_services().store.list_health_readings(request.current_uid, reading_type)
    return success([r.to_json() for r in readings])
