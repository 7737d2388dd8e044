"""Prompt construction for AI diet recommendations."""

from __future__ import annotations

from typing import Any

RECOMMENDATION_TYPES = ("meal_plan", "dietary_advice")

_MEAL_PLAN_TASK = (
    "Create a full day meal plan with breakfast, mid-morning snack, lunch, evening snack, and dinner. "
    "For each meal, specify: food items, portion sizes, timing, Ayurvedic properties, and nutritional breakdown."
)
_ADVICE_TASK = (
    "Provide 5-7 specific dietary recommendations focusing on foods to include, foods to avoid, meal timing, "
    "and lifestyle practices that support their Dosha balance and health goals."
)


def _joined(values, default: str = "None") -> str:
    if not values:
        return default
    if isinstance(values, str):
        return values
    return ", ".join(str(v) for v in values if v) or default


def _or(value, default: str = "Not specified") -> str:
    return default if value in (None, "") else str(value)


def build_recommendation_prompt(patient: dict[str, Any], recommendation_type: str) -> str:
    if recommendation_type not in RECOMMENDATION_TYPES:
        raise ValueError(f"Unknown recommendation type: {recommendation_type!r}")

    task = _MEAL_PLAN_TASK if recommendation_type == "meal_plan" else _ADVICE_TASK
    what = "a detailed meal plan" if recommendation_type == "meal_plan" else "dietary recommendations"

    return f"""You are an expert Ayurvedic nutritionist with deep knowledge of both traditional Ayurveda and modern nutrition science.

Patient Profile:
- Name: {patient.get('name')}
- Age: {patient.get('age')}
- Prakriti (Body Type): {patient.get('prakriti')}
- Health Conditions: {_joined(patient.get('health_conditions'))}
- Dietary Habits: {_or(patient.get('dietary_habits'))}
- Digestion Quality: {_or(patient.get('digestion_quality'))}
- Bowel Pattern: {_or(patient.get('bowel_pattern'))}
- Water Intake: {_or(patient.get('water_intake_liters'))} liters/day
- Meal Preferences: {_joined(patient.get('meal_preferences'))}
- Allergies: {_joined(patient.get('allergies'))}
- Lifestyle: {_or(patient.get('lifestyle_notes'))}

Your task is to provide {what} that:
1. Balances the patient's Dosha (focusing on their Prakriti type)
2. Addresses their specific health conditions
3. Respects their preferences and allergies
4. Follows Ayurvedic principles (Rasa, Guna, Virya, Vipaka)
5. Provides modern nutritional balance

{task}

Format your response as structured JSON with clear sections."""
