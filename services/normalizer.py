"""Tolerant normalizer for AI-generated recommendation payloads.

The generator is asked for JSON but regularly wraps it in markdown fences,
surrounds it with prose, mixes snake_case and camelCase keys, and uses
either a generic ``meals`` list or five fixed meal slots. All of that is
reconciled here, once, into ``CanonicalRecommendation``.

``normalize_recommendation`` never raises: malformed AI output is routine,
so both failure modes come back as values (``MalformedPayload`` and
``NoStructuredData``) for the caller to render.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from services.schemas import (
    AyurvedicProperties,
    CanonicalRecommendation,
    DietaryRecommendation,
    FoodItem,
    MalformedPayload,
    Meal,
    MealPlan,
    NoStructuredData,
    Normalized,
    NormalizeResult,
    NutritionalBreakdown,
)

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 300

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")
_INT = re.compile(r"-?\d+")

# Legacy meal-plan shape: fixed slot key -> display title, in display order.
LEGACY_MEAL_SLOTS = (
    ("breakfast", "Breakfast"),
    ("mid_morning_snack", "Mid-Morning Snack"),
    ("lunch", "Lunch"),
    ("evening_snack", "Evening Snack"),
    ("dinner", "Dinner"),
)

NUTRITION_FIELDS = ("calories", "protein", "carbohydrates", "fiber", "fat")
AYURVEDIC_FIELDS = ("rasa", "guna", "virya", "vipaka", "dosha_effect")


# ------------------------------------------------------------ extraction

def extract_candidate_text(text: str) -> str:
    """Pick the text to parse: ```json fence, then any fence, then the whole string."""
    match = _JSON_FENCE.search(text)
    if match:
        return match.group(1).strip()
    match = _ANY_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _parse_text(text: str) -> Any:
    candidate = extract_candidate_text(text)
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        first_error = exc

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(candidate[start:end + 1])
        except (ValueError, RecursionError):
            pass

    preview = text[:PREVIEW_CHARS]
    logger.warning("Malformed AI payload (%d chars): %s", len(text), first_error)
    return MalformedPayload(error=str(first_error), preview=preview)


# -------------------------------------------------------- reconciliation

def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def lookup(tree: Any, *names: str) -> Any:
    """First non-empty value among the snake_case / camelCase spellings of names.

    Spellings are tried in order: names[0], camel(names[0]), names[1], ...
    When every present value is empty, the first present one is returned so
    callers can still tell "present but empty" from "absent".
    """
    if not isinstance(tree, dict):
        return None
    fallback = None
    for name in names:
        for key in dict.fromkeys((name, _camel(name))):
            if key not in tree:
                continue
            value = tree[key]
            if _is_blank(value):
                if fallback is None:
                    fallback = value
                continue
            return value
    return fallback


def _text(value: Any) -> str | None:
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        parts = [t for t in (_text(v) for v in value) if t]
        return ", ".join(parts) or None
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _text_list(value: Any) -> list[str]:
    if _is_blank(value):
        return []
    if isinstance(value, list):
        return [t for t in (_text(v) for v in value) if t]
    text = _text(value)
    return [text] if text else []


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT.search(value)
        if not match:
            return None
        try:
            return int(match.group())
        except ValueError:
            # digit run longer than the interpreter's int conversion limit
            return None
    return None


def _section(model, node: Any, fields: tuple[str, ...]):
    if not isinstance(node, dict):
        return None
    values = {f: _text(lookup(node, f)) for f in fields}
    if all(v is None for v in values.values()):
        return None
    return model(**values)


def _food_item(node: Any) -> FoodItem:
    if not isinstance(node, dict):
        return FoodItem(item=_text(node) or "")
    return FoodItem(
        item=_text(lookup(node, "item")) or "",
        portion_size=_text(lookup(node, "portion_size")) or "",
        preparation=_text(lookup(node, "preparation")),
        nutritional_breakdown=_section(NutritionalBreakdown, lookup(node, "nutritional_breakdown"), NUTRITION_FIELDS),
        ayurvedic_properties=_section(AyurvedicProperties, lookup(node, "ayurvedic_properties"), AYURVEDIC_FIELDS),
    )


def _meal(node: dict, default_name: str | None = None) -> Meal:
    items = lookup(node, "food_items")
    if not isinstance(items, list):
        items = []
    return Meal(
        name=_text(lookup(node, "meal_name")) or default_name,
        timing=_text(lookup(node, "timing")),
        notes=_text(lookup(node, "notes")),
        food_items=[_food_item(i) for i in items if not _is_blank(i)],
    )


def _meal_plan(node: Any) -> MealPlan | None:
    if not isinstance(node, dict):
        return None

    listed = lookup(node, "meals")
    meals: list[Meal] = []
    if isinstance(listed, list) and listed:
        # Generic list is authoritative; fixed slots are ignored entirely.
        for m in listed:
            if isinstance(m, dict):
                meals.append(_meal(m))
            elif not _is_blank(m):
                meals.append(Meal(notes=_text(m)))
    else:
        for key, title in LEGACY_MEAL_SLOTS:
            slot = lookup(node, key)
            if isinstance(slot, dict):
                meals.append(_meal(slot, default_name=title))
            elif not _is_blank(slot):
                meals.append(Meal(name=title, notes=_text(slot)))

    plan = MealPlan(
        introduction=_text(lookup(node, "introduction")),
        water_intake_recommendation=_text(lookup(node, "water_intake_recommendation")),
        legacy_description=_text(lookup(node, "description")),
        meals=meals,
    )
    if not (plan.meals or plan.introduction or plan.water_intake_recommendation or plan.legacy_description):
        return None
    return plan


def _dietary_recommendations(node: Any) -> list[DietaryRecommendation]:
    if isinstance(node, dict):
        node = [node]
    if not isinstance(node, list):
        return []

    out: list[DietaryRecommendation] = []
    for entry in node:
        if _is_blank(entry):
            continue
        if not isinstance(entry, dict):
            entry = {"title": entry}
        position = len(out) + 1
        out.append(DietaryRecommendation(
            number=_int(lookup(entry, "recommendation_number")) or position,
            title=_text(lookup(entry, "title")) or "",
            description=_text(lookup(entry, "description")) or "",
            foods_to_include=_text_list(lookup(entry, "foods_to_include")),
            foods_to_avoid=_text_list(lookup(entry, "foods_to_avoid")),
            meal_timing=_text_list(lookup(entry, "meal_timing")),
            recommended_beverages=_text_list(lookup(entry, "recommended_beverages")),
            beverages_to_avoid=_text_list(lookup(entry, "beverages_to_avoid")),
            ayurvedic_principles=_text(lookup(entry, "ayurvedic_principles")),
            modern_nutrition_explanation=_text(lookup(entry, "modern_nutrition_explanation")),
        ))
    return out


def reconcile(root: dict) -> CanonicalRecommendation:
    """Map a parsed tree (either key dialect) onto the canonical model."""
    return CanonicalRecommendation(
        patient_name=_text(lookup(root, "patient_name")),
        age=_int(lookup(root, "age")),
        constitution_type=_text(lookup(root, "prakriti", "constitution_type")),
        health_conditions=_text_list(lookup(root, "health_conditions", "health_condition")),
        meal_plan=_meal_plan(lookup(root, "meal_plan")),
        dietary_recommendations=_dietary_recommendations(lookup(root, "dietary_recommendations")),
    )


# ------------------------------------------------------------ entry point

def normalize_recommendation(data: Any) -> NormalizeResult:
    """Normalize raw generator output (text or decoded tree).

    Returns Normalized, MalformedPayload or NoStructuredData.
    """
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")

    if isinstance(data, str):
        root = _parse_text(data)
        if isinstance(root, MalformedPayload):
            return root
    else:
        root = data

    try:
        recommendation = reconcile(root) if isinstance(root, dict) else None
    except RecursionError as exc:
        logger.warning("AI payload nested too deeply to reconcile")
        return MalformedPayload(error=str(exc), preview=data[:PREVIEW_CHARS] if isinstance(data, str) else "")
    if recommendation is None or (recommendation.meal_plan is None and not recommendation.dietary_recommendations):
        shape = list(root)[:20] if isinstance(root, dict) else type(root).__name__
        logger.warning("AI payload has no recognizable recommendation content: %s", shape)
        return NoStructuredData(raw=root)

    return Normalized(recommendation=recommendation)
