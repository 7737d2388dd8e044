import pytest

from services.display import MEAL_ICON_GLYPHS, dosha_tone, format_prakriti, join_conditions, meal_glyph, meal_icon


@pytest.mark.parametrize("name,icon", [
    ("Breakfast", "sunrise"),
    ("Mid-Morning Snack", "coffee"),
    ("Morning tea", "coffee"),
    ("LUNCH", "sun"),
    ("Evening Snack", "tea"),
    ("Afternoon snack", "tea"),
    ("Dinner", "moon"),
    ("Supper", "plate"),
    ("", "plate"),
    (None, "plate"),
    # first match wins
    ("Breakfast or dinner", "sunrise"),
    ("Midnight dinner", "coffee"),
])
def test_meal_icon(name, icon):
    assert meal_icon(name) == icon


def test_meal_glyph_uses_icon_table():
    assert meal_glyph("Dinner") == MEAL_ICON_GLYPHS["moon"]


def test_format_prakriti():
    assert format_prakriti("vata_pitta") == "VATA-PITTA"
    assert format_prakriti("kapha") == "KAPHA"
    assert format_prakriti(None) == ""


@pytest.mark.parametrize("prakriti,tone", [
    ("vata", "vata"),
    ("vata_kapha", "vata"),
    ("pitta_kapha", "pitta"),
    ("kapha", "kapha"),
    ("tridoshic", "kapha"),
])
def test_dosha_tone(prakriti, tone):
    assert dosha_tone(prakriti) == tone


def test_join_conditions():
    assert join_conditions(["Diabetes", "Hypertension"]) == "Diabetes, Hypertension"
    assert join_conditions("Asthma") == "Asthma"
    assert join_conditions([]) == ""
