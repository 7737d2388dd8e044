"""Pydantic models for normalized AI recommendations."""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class NutritionalBreakdown(BaseModel):
    calories: Optional[str] = None
    protein: Optional[str] = None
    carbohydrates: Optional[str] = None
    fiber: Optional[str] = None
    fat: Optional[str] = None


class AyurvedicProperties(BaseModel):
    rasa: Optional[str] = None
    guna: Optional[str] = None
    virya: Optional[str] = None
    vipaka: Optional[str] = None
    dosha_effect: Optional[str] = None


class FoodItem(BaseModel):
    item: str = ""
    portion_size: str = ""
    preparation: Optional[str] = None
    nutritional_breakdown: Optional[NutritionalBreakdown] = None
    ayurvedic_properties: Optional[AyurvedicProperties] = None


class Meal(BaseModel):
    name: Optional[str] = None
    timing: Optional[str] = None
    notes: Optional[str] = None
    food_items: List[FoodItem] = Field(default_factory=list)


class MealPlan(BaseModel):
    """Either a generic meal list or meals synthesized from the fixed slots."""
    introduction: Optional[str] = None
    water_intake_recommendation: Optional[str] = None
    legacy_description: Optional[str] = None
    meals: List[Meal] = Field(default_factory=list)


class DietaryRecommendation(BaseModel):
    number: Optional[int] = None
    title: str = ""
    description: str = ""
    foods_to_include: List[str] = Field(default_factory=list)
    foods_to_avoid: List[str] = Field(default_factory=list)
    meal_timing: List[str] = Field(default_factory=list)
    recommended_beverages: List[str] = Field(default_factory=list)
    beverages_to_avoid: List[str] = Field(default_factory=list)
    ayurvedic_principles: Optional[str] = None
    modern_nutrition_explanation: Optional[str] = None


class CanonicalRecommendation(BaseModel):
    patient_name: Optional[str] = None
    age: Optional[int] = None
    constitution_type: Optional[str] = None
    health_conditions: List[str] = Field(default_factory=list)
    meal_plan: Optional[MealPlan] = None
    dietary_recommendations: List[DietaryRecommendation] = Field(default_factory=list)


class Normalized(BaseModel):
    status: Literal["ok"] = "ok"
    recommendation: CanonicalRecommendation


class MalformedPayload(BaseModel):
    """Text that could not be coerced into any JSON tree."""
    status: Literal["malformed"] = "malformed"
    error: str
    preview: str = ""
    message: str = "Failed to parse recommendation data. The AI response may be incomplete or malformed. Please try generating again."


class NoStructuredData(BaseModel):
    """A tree was parsed but carries no recognizable recommendation content."""
    status: Literal["no_structured_data"] = "no_structured_data"
    raw: Any = None
    message: str = "The AI generated a response but it's not in the expected format."


NormalizeResult = Union[Normalized, MalformedPayload, NoStructuredData]


class NormalizeRequest(BaseModel):
    """Body of POST /api/normalize: raw generator text or an already-decoded tree."""
    data: Any = None
