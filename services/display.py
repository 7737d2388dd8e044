"""Presentation helpers shared by templates and the PDF report."""

from __future__ import annotations

# Icon key -> glyph used in HTML.
MEAL_ICON_GLYPHS = {
    "sunrise": "\U0001F305",
    "coffee": "☕",
    "sun": "\U0001F31E",
    "tea": "\U0001F375",
    "moon": "\U0001F319",
    "plate": "\U0001F37D️",
}


def meal_icon(name: str | None) -> str:
    """Icon key for a meal, by case-insensitive substring match on its name.

    First match wins: breakfast, mid/morning, lunch, evening/snack, dinner.
    """
    n = (name or "").lower()
    if "breakfast" in n:
        return "sunrise"
    if "mid" in n or "morning" in n:
        return "coffee"
    if "lunch" in n:
        return "sun"
    if "evening" in n or "snack" in n:
        return "tea"
    if "dinner" in n:
        return "moon"
    return "plate"


def meal_glyph(name: str | None) -> str:
    return MEAL_ICON_GLYPHS[meal_icon(name)]


def join_conditions(conditions) -> str:
    if not conditions:
        return ""
    if isinstance(conditions, str):
        return conditions
    return ", ".join(str(c) for c in conditions if c)


def format_prakriti(prakriti: str | None) -> str:
    # vata_pitta -> VATA-PITTA
    return (prakriti or "").replace("_", "-", 1).upper()


def dosha_tone(prakriti: str | None) -> str:
    """Badge colour family for a prakriti token."""
    p = (prakriti or "").lower()
    if "vata" in p:
        return "vata"
    if "pitta" in p:
        return "pitta"
    return "kapha"
