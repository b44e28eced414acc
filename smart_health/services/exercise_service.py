import logging

from smart_health.services.ai_service import AIServiceError

logger = logging.getLogger(__name__)

_VIDEO = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

EXERCISE_CATALOGUE = {
    "bp": [
        {"name": "Walking for Blood Pressure", "link": _VIDEO, "duration": "30 min"},
        {"name": "Yoga for Hypertension", "link": _VIDEO, "duration": "20 min"},
        {"name": "Low-Impact Cardio", "link": _VIDEO, "duration": "25 min"},
    ],
    "sugar": [
        {"name": "Diabetes-Friendly Workout", "link": _VIDEO, "duration": "30 min"},
        {"name": "Resistance Training for Diabetics", "link": _VIDEO, "duration": "20 min"},
        {"name": "Aerobic Exercise for Blood Sugar", "link": _VIDEO, "duration": "25 min"},
    ],
    "low-activity": [
        {"name": "Beginner Full Body Workout", "link": _VIDEO, "duration": "20 min"},
        {"name": "Gentle Stretching Routine", "link": _VIDEO, "duration": "15 min"},
        {"name": "Chair Exercises", "link": _VIDEO, "duration": "15 min"},
    ],
    "moderate-activity": [
        {"name": "Intermediate Cardio Workout", "link": _VIDEO, "duration": "30 min"},
        {"name": "Strength Training Basics", "link": _VIDEO, "duration": "25 min"},
        {"name": "HIIT for Beginners", "link": _VIDEO, "duration": "20 min"},
    ],
    "high-activity": [
        {"name": "Advanced HIIT Workout", "link": _VIDEO, "duration": "30 min"},
        {"name": "Full Body Strength Training", "link": _VIDEO, "duration": "40 min"},
        {"name": "Cardio Endurance Training", "link": _VIDEO, "duration": "45 min"},
    ],
}

TRAINER_SYSTEM_PROMPT = (
    "You are a professional fitness trainer. Provide safe, effective exercise plans "
    "with YouTube video recommendations."
)


def exercises_for(condition: str) -> list[dict]:
    return EXERCISE_CATALOGUE.get(condition) or EXERCISE_CATALOGUE["low-activity"]


def condition_for_profile(profile) -> str:
    if profile is None:
        return "low-activity"
    if profile.blood_pressure:
        return "bp"
    if profile.blood_sugar:
        return "sugar"
    if profile.activity_level == "high":
        return "high-activity"
    if profile.activity_level == "moderate":
        return "moderate-activity"
    return "low-activity"


def build_exercise_prompt(condition: str, profile, custom_disease: str = "") -> str:
    details = f"Age: {profile.age}, Gender: {profile.gender}, Activity level: {profile.activity_level}."
    if custom_disease:
        return (
            f"Generate a 5-day exercise plan for someone with {custom_disease}. {details} "
            "Include specific exercises, duration, sets/reps, and provide YouTube video links for each exercise. "
            "Make it safe and appropriate for the condition."
        )
    return (
        f"Generate a 5-day exercise plan for a {condition} patient. {details} "
        "Include specific exercises, duration, sets/reps, and provide YouTube video links for each exercise."
    )


def sample_exercise_plan(condition: str, custom_disease: str = "") -> str:
    target = custom_disease or condition
    return f"""5-Day Exercise Plan for {target}

Day 1 - Cardio Focus:
- Warm-up: 5 min light stretching
- Main: 20 min low-impact cardio (walking/jogging)
- YouTube: {_VIDEO}
- Cool-down: 5 min stretching

Day 2 - Strength Training:
- Warm-up: 5 min
- Main: 3 sets x 10 reps of bodyweight exercises
- YouTube: {_VIDEO}
- Cool-down: 5 min

Day 3-5: Progressive exercise routine...
[Full 5-day plan with specific exercises and YouTube links]"""


def generate_exercise_plan(openai_client, condition: str, profile, custom_disease: str = "") -> dict:
    prompt = build_exercise_prompt(condition, profile, custom_disease)
    try:
        plan = openai_client.generate(prompt, system=TRAINER_SYSTEM_PROMPT, temperature=0.7, max_tokens=1500)
        is_sample = False
    except AIServiceError as exc:
        logger.warning("Exercise plan generation failed, returning sample plan: %s", exc)
        plan = sample_exercise_plan(condition, custom_disease)
        is_sample = True
    return {"plan": plan, "isSample": is_sample}
