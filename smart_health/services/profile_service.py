import re

BP_PATTERN = re.compile(r"^\d{2,3}/\d{2,3}$")


def _number(value):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def calculate_bmi(height_cm, weight_kg) -> tuple[float | None, str]:
    """BMI from height (cm) and weight (kg), rounded to 2 decimals, with its WHO band."""
    height = _number(height_cm)
    weight = _number(weight_kg)
    if not height or not weight:
        return None, "Unknown"

    h = height / 100
    value = round(weight / (h * h), 2)
    if value < 18.5:
        status = "Underweight"
    elif value < 25:
        status = "Normal"
    elif value < 30:
        status = "Overweight"
    else:
        status = "Obese"
    return value, status


def validate_health_profile(profile: dict | None) -> list[str]:
    errors: list[str] = []
    if not profile:
        return ["Profile data is required"]

    height = _number(profile.get("height"))
    weight = _number(profile.get("weight"))
    age = _number(profile.get("age"))

    if not height or height < 50 or height > 250:
        errors.append("Height must be between 50-250 cm")
    if not weight or weight < 20 or weight > 300:
        errors.append("Weight must be between 20-300 kg")
    if not age or age < 1 or age > 150:
        errors.append("Age must be between 1-150 years")
    if not profile.get("activityLevel"):
        errors.append("Activity level is required")

    bp = profile.get("bloodPressure")
    if bp and not BP_PATTERN.match(str(bp)):
        errors.append("Blood pressure format: 120/80")

    sugar = profile.get("bloodSugar")
    if sugar not in (None, ""):
        sugar_value = _number(sugar)
        if sugar_value is None or sugar_value < 50 or sugar_value > 500:
            errors.append("Blood sugar must be between 50-500 mg/dL")

    return errors


def is_profile_complete(profile) -> bool:
    if profile is None:
        return False
    return bool(profile.height and profile.weight and profile.age and profile.activity_level)
