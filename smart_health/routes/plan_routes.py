from flask import Blueprint, request

from smart_health.extensions import get_services
from smart_health.services.diet_service import generate_diet_plan
from smart_health.services.exercise_service import (
    EXERCISE_CATALOGUE,
    condition_for_profile,
    exercises_for,
    generate_exercise_plan,
)
from smart_health.services.firestore_store import DIET_PLANS, EXERCISE_PLANS
from smart_health.services.profile_service import is_profile_complete
from smart_health.utils.request_data import InvalidField, json_body, object_field, text_field
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

plan_bp = Blueprint("plans", __name__, url_prefix="/api/plans")


def _profile_snapshot(user) -> dict:
    return {
        "age": user.age,
        "gender": user.gender,
        "height": user.height,
        "weight": user.weight,
        "bmi": user.bmi,
        "bmiStatus": user.bmi_status,
        "activityLevel": user.activity_level,
        "bloodPressure": user.blood_pressure,
        "bloodSugar": user.blood_sugar,
    }


@plan_bp.route("/diet", methods=["POST"])
@firebase_token_required()
def diet_plan():
    data = json_body()
    try:
        diet_type = text_field(data, "dietType")
        preferences = object_field(data, "preferences")
    except InvalidField as exc:
        return error(str(exc), 400)
    if not diet_type:
        return error("dietType is required", 400)

    services = get_services()
    user = services.store.get_user(request.current_uid)
    if not is_profile_complete(user):
        return error("Please complete your health profile first", 400)

    result = generate_diet_plan(services.gemini, diet_type, user, preferences)

    plan_id = services.store.add_plan(DIET_PLANS, {
        "userId": request.current_uid,
        "dietType": diet_type,
        "preferences": preferences,
        "profile": _profile_snapshot(user),
        **result,
    })
    return success(dict(result, id=plan_id, dietType=diet_type), "Diet plan generated")


@plan_bp.route("/exercise", methods=["POST"])
@firebase_token_required()
def exercise_plan():
    data = json_body()
    try:
        custom_disease = text_field(data, "customDisease")
        condition = text_field(data, "condition")
    except InvalidField as exc:
        return error(str(exc), 400)

    services = get_services()
    user = services.store.get_user(request.current_uid)
    if user is None:
        return error("Please complete your health profile first", 400)

    if condition not in EXERCISE_CATALOGUE:
        condition = condition_for_profile(user)

    result = generate_exercise_plan(services.openai, condition, user, custom_disease)

    plan_id = services.store.add_plan(EXERCISE_PLANS, {
        "userId": request.current_uid,
        "condition": condition,
        "customDisease": custom_disease or None,
        **result,
    })
    return success(dict(result, id=plan_id, condition=condition), "Exercise plan generated")


@plan_bp.route("/exercise/recommendations", methods=["GET"])
@firebase_token_required()
def exercise_recommendations():
    user = get_services().store.get_user(request.current_uid)
    condition = request.args.get("condition") or condition_for_profile(user)
    if condition not in EXERCISE_CATALOGUE:
        condition = "low-activity"
    return success({"condition": condition, "exercises": exercises_for(condition)})
