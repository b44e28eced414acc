import logging
from dataclasses import dataclass

from smart_health.services.ai_service import AIServiceError

logger = logging.getLogger(__name__)

DIET_TYPES = (
    "weight-loss-veg", "weight-loss-nonveg", "weight-gain", "maintain-weight",
    "bp-patient", "sugar-patient", "custom",
)


@dataclass
class DietGoal:
    goal: str
    is_vegetarian: bool
    condition: str
    lead: str


def resolve_diet_goal(diet_type: str, profile, preferences: dict | None = None) -> DietGoal:
    p = profile
    preferences = preferences or {}
    who = f"a {p.age}-year-old {p.gender} with BMI {p.bmi} ({p.bmi_status}) and {p.activity_level} activity level"

    if diet_type == "weight-loss-veg":
        return DietGoal("Weight Loss", True, "",
                        f"Generate a comprehensive 7-day vegetarian weight loss diet plan for {who}.")
    if diet_type == "weight-loss-nonveg":
        return DietGoal("Weight Loss", False, "",
                        f"Generate a comprehensive 7-day non-vegetarian weight loss diet plan for {who}.")
    if diet_type == "weight-gain":
        return DietGoal("Weight Gain", False, "",
                        f"Generate a comprehensive 7-day weight gain diet plan for {who}.")
    if diet_type == "maintain-weight":
        return DietGoal("Maintain Weight", False, "",
                        f"Generate a comprehensive 7-day weight maintenance diet plan for {who}.")
    if diet_type == "bp-patient":
        return DietGoal(
            "Blood Pressure Management", False, "Blood Pressure",
            f"Generate a comprehensive 7-day low-sodium diet plan for a blood pressure patient. "
            f"Current BP: {p.blood_pressure}. Age: {p.age}, Gender: {p.gender}, BMI: {p.bmi}, "
            f"Activity level: {p.activity_level}.",
        )
    if diet_type == "sugar-patient":
        return DietGoal(
            "Blood Sugar Management", False, "Diabetes",
            f"Generate a comprehensive 7-day diabetic-friendly diet plan. "
            f"Current blood sugar: {p.blood_sugar} mg/dL. Age: {p.age}, Gender: {p.gender}, "
            f"BMI: {p.bmi}, Activity level: {p.activity_level}.",
        )
    if diet_type == "custom":
        disease = preferences.get("disease")
        condition = (disease.strip() if isinstance(disease, str) else "") or "general health"
        return DietGoal(
            "Custom Health Condition", False, condition,
            f"Generate a comprehensive 7-day personalized diet plan for someone with {condition}. "
            f"Age: {p.age}, Gender: {p.gender}, BMI: {p.bmi}, Activity level: {p.activity_level}.",
        )
    return DietGoal(
        "General Health", False, "",
        f"Generate a comprehensive 7-day balanced diet plan for a {p.age}-year-old {p.gender}, "
        f"BMI {p.bmi}, {p.activity_level} activity level.",
    )


def build_diet_prompt(goal: DietGoal, profile) -> str:
    condition_line = f"   - Special considerations for {goal.condition}\n" if goal.condition else ""
    veg_line = (
        "IMPORTANT: This must be a STRICTLY VEGETARIAN diet plan. No meat, fish, or poultry allowed.\n"
        if goal.is_vegetarian else ""
    )
    return f"""{goal.lead}

Please structure the diet plan with the following sections:

1. **Daily Meal Structure** (7 days):
   - Breakfast (with timing and portion sizes)
   - Mid-morning Snack
   - Lunch (with timing and portion sizes)
   - Afternoon Snack
   - Dinner (with timing and portion sizes)
   - Evening Drink (optional)

2. **Nutritional Information**:
   - Approximate daily calories
   - Macronutrient breakdown (carbs, proteins, fats)
   - Key nutrients to focus on

3. **Do's and Don'ts**:
   - Foods to include regularly
   - Foods to avoid or limit
   - Eating habits to follow
   - Portion control guidelines

4. **Water Intake Recommendation**:
   - Daily water intake based on age, activity level, and health condition
   - Tips for staying hydrated

5. **Health Considerations**:
   - How this diet supports {goal.goal}
{condition_line}   - Adjustments based on BMI status: {profile.bmi_status}

{veg_line}
Make the plan practical, easy to follow, and nutritionally balanced. Use simple language and include approximate portion sizes."""


# =========================
# SAMPLE PLANS (used when Gemini is unavailable)
# =========================
SAMPLE_PLANS = {
    "weight-loss-veg": {
        "title": "7-Day Vegetarian Weight Loss Diet Plan",
        "calories": "1500-1800 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Oatmeal with berries and nuts (300 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Greek yogurt with apple (150 kcal)\n"
            "**Lunch (1:00 PM)**: Quinoa salad with mixed vegetables and chickpeas (400 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Carrot sticks with hummus (150 kcal)\n"
            "**Dinner (7:00 PM)**: Grilled tofu with steamed broccoli and brown rice (400 kcal)\n"
            "**Evening Drink (9:00 PM)**: Herbal tea (0 kcal)"
        ),
    },
    "weight-loss-nonveg": {
        "title": "7-Day Non-Vegetarian Weight Loss Diet Plan",
        "calories": "1600-1900 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Scrambled eggs with spinach and whole grain toast (350 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Cottage cheese with cucumber (150 kcal)\n"
            "**Lunch (1:00 PM)**: Grilled chicken breast with mixed greens salad (450 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Protein shake with banana (200 kcal)\n"
            "**Dinner (7:00 PM)**: Baked fish with quinoa and steamed vegetables (400 kcal)\n"
            "**Evening Drink (9:00 PM)**: Green tea (0 kcal)"
        ),
    },
    "weight-gain": {
        "title": "7-Day Weight Gain Diet Plan",
        "calories": "2800-3200 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Protein smoothie with banana, peanut butter, and oats (600 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Whole grain sandwich with cheese and avocado (500 kcal)\n"
            "**Lunch (1:00 PM)**: Chicken curry with rice and vegetables (700 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Nuts, dried fruits, and cheese (400 kcal)\n"
            "**Dinner (7:00 PM)**: Pasta with meat sauce and garlic bread (600 kcal)\n"
            "**Evening Drink (9:00 PM)**: Protein shake (200 kcal)"
        ),
    },
    "maintain-weight": {
        "title": "7-Day Weight Maintenance Diet Plan",
        "calories": "2000-2200 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Whole grain cereal with milk and fruits (350 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Yogurt with granola (200 kcal)\n"
            "**Lunch (1:00 PM)**: Turkey sandwich with salad (450 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Apple with almond butter (200 kcal)\n"
            "**Dinner (7:00 PM)**: Grilled salmon with sweet potato and vegetables (500 kcal)\n"
            "**Evening Drink (9:00 PM)**: Herbal tea (0 kcal)"
        ),
    },
    "bp-patient": {
        "title": "7-Day Low-Sodium Blood Pressure Diet Plan",
        "calories": "1800-2000 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Oatmeal with fresh berries (no salt) (300 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Fresh fruit salad (150 kcal)\n"
            "**Lunch (1:00 PM)**: Grilled chicken with unsalted rice and steamed vegetables (450 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Carrot sticks with unsalted hummus (150 kcal)\n"
            "**Dinner (7:00 PM)**: Baked fish with quinoa and low-sodium herbs (400 kcal)\n"
            "**Evening Drink (9:00 PM)**: Unsweetened herbal tea (0 kcal)"
        ),
    },
    "sugar-patient": {
        "title": "7-Day Diabetic-Friendly Diet Plan",
        "calories": "1600-1800 kcal/day",
        "structure": (
            "**Breakfast (8:00 AM)**: Whole grain toast with avocado and eggs (300 kcal)\n"
            "**Mid-morning Snack (10:30 AM)**: Handful of almonds (150 kcal)\n"
            "**Lunch (1:00 PM)**: Grilled chicken salad with olive oil dressing (400 kcal)\n"
            "**Afternoon Snack (4:00 PM)**: Greek yogurt with low-GI berries (150 kcal)\n"
            "**Dinner (7:00 PM)**: Baked salmon with sweet potato and green vegetables (400 kcal)\n"
            "**Evening Drink (9:00 PM)**: Water with lemon (0 kcal)"
        ),
    },
}

_INCLUDE_VEG = (
    "- Leafy greens, legumes, whole grains\n- Nuts and seeds\n"
    "- Fresh fruits and vegetables\n- Dairy products (low-fat)"
)
_INCLUDE_NONVEG = (
    "- Lean proteins (chicken, fish, eggs)\n- Whole grains and legumes\n"
    "- Fresh fruits and vegetables\n- Healthy fats (avocado, nuts)"
)
_AVOID = {
    "Blood Pressure": "- Processed foods high in sodium\n- Canned foods\n- Fast food\n- Excessive salt",
    "Diabetes": "- Sugary foods and beverages\n- Refined carbohydrates\n- High-GI foods\n- Excessive sweets",
}
_AVOID_DEFAULT = "- Processed snacks\n- Sugary drinks\n- Excessive fried foods\n- High-calorie desserts"


def sample_diet_plan(diet_type: str, profile, goal: DietGoal) -> str:
    plan = SAMPLE_PLANS.get(diet_type, SAMPLE_PLANS["maintain-weight"])
    medical_focus = f"- **Medical Focus**: {goal.condition}\n" if goal.condition else ""
    special = f" Special attention is given to managing {goal.condition}." if goal.condition else ""
    return f"""# {plan['title']}

## Nutritional Overview
- **Daily Calories**: {plan['calories']}
- **Macronutrients**: 40% carbs, 30% protein, 30% fats
- **Goal**: {goal.goal}
{medical_focus}- **Diet Type**: {'Vegetarian' if goal.is_vegetarian else 'Non-Vegetarian'}

## Daily Meal Structure
{plan['structure']}

## Do's and Don'ts

### Foods to Include:
{_INCLUDE_VEG if goal.is_vegetarian else _INCLUDE_NONVEG}

### Foods to Avoid/Limit:
{_AVOID.get(goal.condition, _AVOID_DEFAULT)}

### Eating Habits:
- Eat every 3-4 hours
- Stay hydrated throughout the day
- Practice portion control
- Include protein in every meal

## Water Intake Recommendation
- **Daily Goal**: 8-10 glasses (2.5-3 liters)
- **Activity Adjustment**: Add 1 extra glass for every 30 minutes of exercise
- **Tips**: Drink water before meals, carry a water bottle, set reminders

## Health Considerations
This diet plan is designed to support {goal.goal.lower()} while considering your BMI status ({profile.bmi_status}) and activity level ({profile.activity_level}).{special}

*Note: This is a general plan. Consult with a healthcare professional for personalized advice.*"""


def generate_diet_plan(gemini, diet_type: str, profile, preferences: dict | None = None) -> dict:
    goal = resolve_diet_goal(diet_type, profile, preferences)
    prompt = build_diet_prompt(goal, profile)

    is_sample = False
    try:
        plan = gemini.generate(prompt, temperature=0.7, max_output_tokens=2048)
    except AIServiceError as exc:
        logger.warning("Gemini diet plan failed, falling back to sample plan: %s", exc)
        plan = sample_diet_plan(diet_type, profile, goal)
        is_sample = True

    return {
        "plan": plan,
        "goal": goal.goal,
        "condition": goal.condition,
        "isVegetarian": goal.is_vegetarian,
        "isSample": is_sample,
    }
