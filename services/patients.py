"""Patient profile form handling."""

from __future__ import annotations

import math
from typing import Any

GENDERS = ("male", "female", "other")
PRAKRITI_TYPES = (
    "vata",
    "pitta",
    "kapha",
    "vata_pitta",
    "pitta_kapha",
    "vata_kapha",
    "tridoshic",
)


class PatientValidationError(ValueError):
    """Form input that cannot become a patient record; message is user-facing."""


def split_list(text: str | None) -> list[str]:
    """'Diabetes, , Hypertension' -> ['Diabetes', 'Hypertension']"""
    if not text:
        return []
    return [p.strip() for p in text.split(",") if p.strip()]


def _optional_float(value: Any, label: str) -> float | None:
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PatientValidationError(f"{label} must be a number.") from None
    if not math.isfinite(number):
        raise PatientValidationError(f"{label} must be a number.")
    return number


def build_patient_record(form: dict[str, Any]) -> dict[str, Any]:
    """Validate raw form fields and build the record stored in the patients table."""
    name = (form.get("name") or "").strip()
    if not name:
        raise PatientValidationError("Name is required.")

    try:
        age = int(str(form.get("age", "")).strip())
    except ValueError:
        raise PatientValidationError("Age must be a whole number.") from None
    if not 0 <= age <= 130:
        raise PatientValidationError("Age must be between 0 and 130.")

    gender = (form.get("gender") or "").strip().lower()
    if gender not in GENDERS:
        raise PatientValidationError("Please select a gender.")

    prakriti = (form.get("prakriti") or "").strip().lower().replace("-", "_")
    if prakriti not in PRAKRITI_TYPES:
        raise PatientValidationError("Please select a prakriti.")

    water = _optional_float(form.get("water_intake_liters"), "Water intake")
    if water is not None and water < 0:
        raise PatientValidationError("Water intake cannot be negative.")

    return {
        "name": name,
        "age": age,
        "gender": gender,
        "prakriti": prakriti,
        "health_conditions": split_list(form.get("health_conditions")),
        "dietary_habits": (form.get("dietary_habits") or "").strip(),
        "digestion_quality": (form.get("digestion_quality") or "").strip(),
        "bowel_pattern": (form.get("bowel_pattern") or "").strip(),
        "water_intake_liters": water,
        "meal_preferences": split_list(form.get("meal_preferences")),
        "allergies": split_list(form.get("allergies")),
        "lifestyle_notes": (form.get("lifestyle_notes") or "").strip(),
    }
