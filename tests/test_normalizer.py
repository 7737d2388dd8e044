import json

import pytest

from services.normalizer import extract_candidate_text, lookup, normalize_recommendation
from services.schemas import MalformedPayload, NoStructuredData, Normalized

TREE = {
    "patient_name": "Asha",
    "age": 42,
    "prakriti": "vata_pitta",
    "health_conditions": ["Hypertension", "Acidity"],
    "meal_plan": {
        "introduction": "Warm, grounding meals.",
        "meals": [
            {
                "meal_name": "Breakfast",
                "timing": "7:30 AM",
                "food_items": [
                    {
                        "item": "Oats porridge",
                        "portion_size": "1 bowl",
                        "preparation": "Cook with cardamom",
                        "nutritional_breakdown": {"calories": 180, "protein": "6g"},
                        "ayurvedic_properties": {"rasa": "Sweet", "dosha_effect": "Pacifies Vata"},
                    }
                ],
                "notes": "Eat slowly",
            }
        ],
    },
    "dietary_recommendations": [
        {"title": "Favour warm foods", "description": "Cooked over raw.", "foods_to_include": ["Ghee", "Rice"]},
    ],
}


def test_string_and_tree_normalize_identically():
    assert normalize_recommendation(json.dumps(TREE)) == normalize_recommendation(TREE)


def test_json_fence_is_transparent():
    text = "Here you go:\n```json\n" + json.dumps(TREE, indent=2) + "\n```\nLet me know!"
    assert normalize_recommendation(text) == normalize_recommendation(TREE)


def test_plain_fence_is_used_when_no_json_fence():
    text = "```\n" + json.dumps(TREE) + "\n```"
    assert normalize_recommendation(text) == normalize_recommendation(TREE)


def test_surrounding_prose_is_recovered():
    text = "Namaste! Below is the plan.\n" + json.dumps(TREE) + "\nStay well."
    result = normalize_recommendation(text)
    assert isinstance(result, Normalized)
    assert result == normalize_recommendation(TREE)


def test_end_to_end_example():
    text = '```json\n{"patient_name":"Asha","meal_plan":{"meals":[{"meal_name":"Lunch","food_items":[{"item":"Dal","portion_size":"1 cup"}]}]}}\n```'
    result = normalize_recommendation(text)

    assert isinstance(result, Normalized)
    rec = result.recommendation
    assert rec.patient_name == "Asha"
    assert rec.dietary_recommendations == []
    assert len(rec.meal_plan.meals) == 1
    meal = rec.meal_plan.meals[0]
    assert meal.name == "Lunch"
    assert [(f.item, f.portion_size) for f in meal.food_items] == [("Dal", "1 cup")]


def test_food_item_details():
    food = normalize_recommendation(TREE).recommendation.meal_plan.meals[0].food_items[0]
    assert food.preparation == "Cook with cardamom"
    assert food.nutritional_breakdown.calories == "180"
    assert food.nutritional_breakdown.fat is None
    assert food.ayurvedic_properties.dosha_effect == "Pacifies Vata"


def test_plain_refusal_is_malformed():
    text = "Sorry, I cannot comply."
    result = normalize_recommendation(text)
    assert isinstance(result, MalformedPayload)
    assert "Expecting value" in result.error
    assert result.preview == text


def test_malformed_preview_is_truncated():
    text = "not json " * 100
    result = normalize_recommendation(text)
    assert isinstance(result, MalformedPayload)
    assert len(result.preview) == 300
    assert result.preview == text[:300]


@pytest.mark.parametrize("text", [
    'Plan: {"meal_plan": {"meals": [',
    '```json\n{"meal_plan": {"meals": [{"meal_name": "Lunch"\n```',
    '} stray closing before opening {',
])
def test_truncated_or_unbalanced_is_malformed(text):
    assert isinstance(normalize_recommendation(text), MalformedPayload)


def test_unrecognized_tree_is_no_structured_data():
    result = normalize_recommendation('{"foo": "bar"}')
    assert isinstance(result, NoStructuredData)
    assert result.raw == {"foo": "bar"}


@pytest.mark.parametrize("data", [None, 42, [1, 2], "[1, 2]", {"meal_plan": {}}, {"dietary_recommendations": []}])
def test_empty_or_non_object_trees_are_no_structured_data(data):
    assert isinstance(normalize_recommendation(data), NoStructuredData)


def test_snake_case_wins_over_camel_case():
    result = normalize_recommendation({
        "health_condition": "A",
        "healthCondition": "B",
        "patient_name": "Snake",
        "patientName": "Camel",
        "dietary_recommendations": [{"title": "snake"}],
        "dietaryRecommendations": [{"title": "camel"}],
    })
    rec = result.recommendation
    assert rec.health_conditions == ["A"]
    assert rec.patient_name == "Snake"
    assert [d.title for d in rec.dietary_recommendations] == ["snake"]


def test_empty_snake_value_falls_back_to_camel():
    rec = normalize_recommendation({
        "patient_name": "",
        "patientName": "Ravi",
        "dietaryRecommendations": [{"title": "t"}],
    }).recommendation
    assert rec.patient_name == "Ravi"


def test_camel_case_dietary_fields():
    rec = normalize_recommendation({
        "dietaryRecommendations": [{
            "recommendationNumber": 2,
            "title": "Sip warm water",
            "description": "Through the day.",
            "foodsToInclude": ["Ginger tea"],
            "foodsToAvoid": ["Iced drinks"],
            "mealTiming": "Dinner before 7 PM",
            "recommendedBeverages": ["CCF tea"],
            "beveragesToAvoid": "Cold water",
            "ayurvedicPrinciples": "Kindles agni",
            "modernNutritionExplanation": "Aids hydration",
        }],
    }).recommendation
    dr = rec.dietary_recommendations[0]
    assert dr.number == 2
    assert dr.foods_to_include == ["Ginger tea"]
    assert dr.foods_to_avoid == ["Iced drinks"]
    assert dr.meal_timing == ["Dinner before 7 PM"]
    assert dr.recommended_beverages == ["CCF tea"]
    assert dr.beverages_to_avoid == ["Cold water"]
    assert dr.ayurvedic_principles == "Kindles agni"
    assert dr.modern_nutrition_explanation == "Aids hydration"


def test_missing_numbers_fall_back_to_position():
    rec = normalize_recommendation({
        "dietary_recommendations": [{"title": "a"}, {"title": "b", "recommendation_number": 7}, {"title": "c"}],
    }).recommendation
    assert [d.number for d in rec.dietary_recommendations] == [1, 7, 3]


def test_health_conditions_string_becomes_list():
    rec = normalize_recommendation({
        "health_conditions": "Diabetes, Hypertension",
        "dietary_recommendations": [{"title": "x"}],
    }).recommendation
    assert rec.health_conditions == ["Diabetes, Hypertension"]


def test_meals_list_ignores_legacy_slots():
    rec = normalize_recommendation({
        "meal_plan": {
            "meals": [{"meal_name": "Lunch"}],
            "breakfast": {"meal_name": "Oats"},
            "dinner": {"meal_name": "Soup"},
        },
    }).recommendation
    assert [m.name for m in rec.meal_plan.meals] == ["Lunch"]


def test_legacy_slots_in_display_order_and_absent_skipped():
    rec = normalize_recommendation({
        "meal_plan": {
            "description": "Legacy plan",
            "dinner": {"timing": "7 PM", "food_items": [{"item": "Khichdi", "portion_size": "1 bowl"}]},
            "breakfast": {"meal_name": "Porridge"},
            "evening_snack": "Roasted makhana",
        },
    }).recommendation
    plan = rec.meal_plan
    assert plan.legacy_description == "Legacy plan"
    assert [m.name for m in plan.meals] == ["Porridge", "Evening Snack", "Dinner"]
    assert plan.meals[1].notes == "Roasted makhana"
    assert plan.meals[2].food_items[0].item == "Khichdi"


def test_empty_meals_list_uses_legacy_slots():
    rec = normalize_recommendation({"meal_plan": {"meals": [], "lunch": {}}}).recommendation
    assert [m.name for m in rec.meal_plan.meals] == ["Lunch"]


def test_camel_case_meal_plan_and_food_items():
    rec = normalize_recommendation({
        "mealPlan": {
            "waterIntakeRecommendation": "2L",
            "meals": [{
                "mealName": "Dinner",
                "foodItems": [{"item": "Soup", "portionSize": "1 bowl", "ayurvedicProperties": {"doshaEffect": "Calms Pitta"}}],
            }],
        },
    }).recommendation
    assert rec.meal_plan.water_intake_recommendation == "2L"
    food = rec.meal_plan.meals[0].food_items[0]
    assert (food.item, food.portion_size) == ("Soup", "1 bowl")
    assert food.ayurvedic_properties.dosha_effect == "Calms Pitta"


def test_age_and_constitution():
    rec = normalize_recommendation({
        "age": "45 years",
        "constitutionType": "kapha",
        "dietary_recommendations": [{"title": "x"}],
    }).recommendation
    assert rec.age == 45
    assert rec.constitution_type == "kapha"


def test_normalization_is_idempotent():
    text = "```json\n" + json.dumps(TREE) + "\n```"
    assert normalize_recommendation(text) == normalize_recommendation(text)


def test_extract_candidate_text_priority():
    assert extract_candidate_text('```\n{"a": 1}\n``` and ```json\n{"b": 2}\n```') == '{"b": 2}'
    assert extract_candidate_text('  {"a": 1}  ') == '{"a": 1}'


def test_lookup_order():
    assert lookup({"fooBar": 2, "foo_bar": 1}, "foo_bar") == 1
    assert lookup({"fooBar": 2}, "foo_bar") == 2
    assert lookup({"foo_bar": []}, "foo_bar") == []
    assert lookup({}, "foo_bar") is None


@pytest.mark.parametrize("text", [
    '{"age": NaN, "dietary_recommendations": [{"title": "x"}]}',
    '{"age": -Infinity, "dietary_recommendations": [{"title": "x"}]}',
    '{"age": "' + "1" * 5000 + '", "dietary_recommendations": [{"title": "x"}]}',
])
def test_unusable_age_is_dropped(text):
    result = normalize_recommendation(text)
    assert isinstance(result, Normalized)
    assert result.recommendation.age is None


def test_non_finite_recommendation_number_falls_back_to_position():
    result = normalize_recommendation(
        '{"dietary_recommendations": [{"title": "a", "recommendation_number": Infinity},'
        ' {"title": "b", "recommendation_number": NaN}]}'
    )
    assert [d.number for d in result.recommendation.dietary_recommendations] == [1, 2]


def test_deeply_nested_text_is_malformed():
    result = normalize_recommendation("[" * 100000)
    assert isinstance(result, MalformedPayload)
    assert result.preview == "[" * 300


def test_deeply_nested_value_in_tree_is_malformed():
    value = "x"
    for _ in range(5000):
        value = [value]
    result = normalize_recommendation({"dietary_recommendations": [{"title": value}]})
    assert isinstance(result, MalformedPayload)
    assert result.preview == ""


def test_plain_text_entries_in_meals_list_become_notes():
    rec = normalize_recommendation({
        "meal_plan": {"meals": ["Warm water with lemon on waking", {"meal_name": "Lunch"}, "  "]},
    }).recommendation
    meals = rec.meal_plan.meals
    assert [(m.name, m.notes) for m in meals] == [(None, "Warm water with lemon on waking"), ("Lunch", None)]
