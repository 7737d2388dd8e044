"""PDF export of a normalized recommendation (printable diet chart).

Uses reportlab (pure python). Generates bytes.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Any

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from services.display import format_prakriti, join_conditions
from services.schemas import MalformedPayload, NoStructuredData, NormalizeResult

LEFT = 0.8 * inch
RIGHT = 7.6 * inch
BOTTOM = 1.0 * inch


class _Writer:
    """Top-down text cursor that wraps lines and breaks pages."""

    def __init__(self, c: canvas.Canvas, height: float):
        self.c = c
        self.top = height - 0.8 * inch
        self.y = self.top
        self.font = ("Helvetica", 10)

    def set_font(self, name: str, size: int):
        self.font = (name, size)
        self.c.setFont(name, size)

    def gap(self, amount: float = 0.12 * inch):
        self.y -= amount

    def line(self, text: str, indent: float = 0.0):
        name, size = self.font
        width = RIGHT - LEFT - indent
        for chunk in simpleSplit(text, name, size, width) or [""]:
            if self.y < BOTTOM:
                self.c.showPage()
                self.y = self.top
                self.c.setFont(name, size)
            self.c.drawString(LEFT + indent, self.y, chunk)
            self.y -= size * 1.45


def build_recommendation_pdf(patient: dict[str, Any], result: NormalizeResult, *, created_at: str | None = None) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    _, h = letter
    w = _Writer(c, h)

    w.set_font("Helvetica-Bold", 16)
    w.line("AyurDiet AI: Diet Chart")
    w.set_font("Helvetica", 10)
    w.line(f"Generated: {created_at or datetime.now().strftime('%Y-%m-%d %H:%M')}")
    w.line(
        f"Patient: {patient.get('name', '-')}, {patient.get('age', '-')}y, "
        f"prakriti={format_prakriti(patient.get('prakriti')) or '-'}"
    )
    conditions = join_conditions(patient.get("health_conditions"))
    if conditions:
        w.line(f"Conditions: {conditions}")
    w.gap()

    if isinstance(result, MalformedPayload):
        w.set_font("Helvetica-Bold", 12)
        w.line("Failed to parse recommendation data")
        w.set_font("Helvetica", 9)
        w.line(result.error)
        w.line(f"Preview: {result.preview}")
    elif isinstance(result, NoStructuredData):
        w.set_font("Helvetica-Bold", 12)
        w.line("No structured data found")
        w.set_font("Helvetica", 9)
        w.line(result.message)
    else:
        _write_recommendation(w, result.recommendation)

    c.showPage()
    c.save()
    return buf.getvalue()


def _write_recommendation(w: _Writer, rec) -> None:
    plan = rec.meal_plan
    if plan is not None:
        w.set_font("Helvetica-Bold", 12)
        w.line("Meal Plan")
        w.set_font("Helvetica", 10)
        for text in (plan.introduction, plan.legacy_description):
            if text:
                w.line(text)
        for meal in plan.meals:
            w.gap()
            w.set_font("Helvetica-Bold", 11)
            w.line(" - ".join(x for x in (meal.name or "Meal", meal.timing) if x))
            w.set_font("Helvetica", 9)
            for fi in meal.food_items:
                w.line(f"• {fi.item}" + (f" ({fi.portion_size})" if fi.portion_size else ""), indent=0.2 * inch)
                if fi.preparation:
                    w.line(f"Preparation: {fi.preparation}", indent=0.4 * inch)
                nb = fi.nutritional_breakdown
                if nb:
                    parts = [f"{k}: {v}" for k, v in nb.model_dump().items() if v]
                    w.line("Nutrition: " + ", ".join(parts), indent=0.4 * inch)
                ap = fi.ayurvedic_properties
                if ap:
                    parts = [f"{k.replace('_', ' ')}: {v}" for k, v in ap.model_dump().items() if v]
                    w.line("Ayurveda: " + ", ".join(parts), indent=0.4 * inch)
            if meal.notes:
                w.line(f"Notes: {meal.notes}", indent=0.2 * inch)
        if plan.water_intake_recommendation:
            w.gap()
            w.set_font("Helvetica", 10)
            w.line(f"Water intake: {plan.water_intake_recommendation}")
        w.gap(0.2 * inch)

    if rec.dietary_recommendations:
        w.set_font("Helvetica-Bold", 12)
        w.line("Dietary Recommendations")
        for dr in rec.dietary_recommendations:
            w.gap()
            w.set_font("Helvetica-Bold", 10)
            w.line(f"{dr.number}. {dr.title}")
            w.set_font("Helvetica", 9)
            if dr.description:
                w.line(dr.description, indent=0.2 * inch)
            for label, values in (
                ("Include", dr.foods_to_include),
                ("Avoid", dr.foods_to_avoid),
                ("Meal timing", dr.meal_timing),
                ("Beverages", dr.recommended_beverages),
                ("Beverages to avoid", dr.beverages_to_avoid),
            ):
                if values:
                    w.line(f"{label}: {', '.join(values)}", indent=0.2 * inch)
            if dr.ayurvedic_principles:
                w.line(f"Ayurvedic principles: {dr.ayurvedic_principles}", indent=0.2 * inch)
            if dr.modern_nutrition_explanation:
                w.line(f"Modern nutrition: {dr.modern_nutrition_explanation}", indent=0.2 * inch)
