"""Generate, normalize and store AI diet recommendations for a patient.

Flow:
1) Build a prompt from the patient record.
2) Ask the text generator (services.llm) for raw output.
3) Normalize the raw text for display.
4) Persist the raw text (opaque) keyed by patient; a failed save is not fatal.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from config import DEFAULT_RECOMMENDATION_PRIORITY
from database import get_recommendation, save_recommendation
from services import llm
from services.normalizer import normalize_recommendation
from services.prompts import build_recommendation_prompt

logger = logging.getLogger(__name__)


def generate_for_patient(patient: dict[str, Any], recommendation_type: str) -> dict[str, Any]:
    """Raises ValueError for an unknown type and llm.GenerationError if generation fails."""
    prompt = build_recommendation_prompt(patient, recommendation_type)
    raw = llm.generate(prompt)
    result = normalize_recommendation(raw)

    recommendation_id = None
    try:
        recommendation_id = save_recommendation(
            patient["id"],
            recommendation_type,
            {"recommendation": raw},
            priority=DEFAULT_RECOMMENDATION_PRIORITY,
        )
    except sqlite3.Error as e:
        logger.error("Recommendation generated but failed to save for patient %s: %s", patient.get("id"), e)

    return {
        "recommendation": raw,
        "recommendation_type": recommendation_type,
        "patient_info": {
            "name": patient.get("name"),
            "prakriti": patient.get("prakriti"),
            "conditions": patient.get("health_conditions") or [],
        },
        "result": result,
        "recommendation_id": recommendation_id,
        "saved": recommendation_id is not None,
    }


def load_recommendation(user_id: int, recommendation_id: int) -> dict[str, Any] | None:
    """Stored recommendation with its content normalized again."""
    rec = get_recommendation(user_id, recommendation_id)
    if rec is None:
        return None
    content = rec.get("content")
    raw = content.get("recommendation") if isinstance(content, dict) else content
    rec["result"] = normalize_recommendation(raw)
    return rec
