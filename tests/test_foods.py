import database
from services.foods import filter_foods, get_sample_foods


def test_filter_by_name_is_case_insensitive():
    names = [f["name"] for f in filter_foods(get_sample_foods(), "GHEE")]
    assert names == ["Ghee"]


def test_filter_by_category():
    names = {f["name"] for f in filter_foods(get_sample_foods(), "spices")}
    assert names == {"Fresh Ginger", "Turmeric", "Cumin Seeds"}


def test_blank_query_returns_everything():
    foods = get_sample_foods()
    assert filter_foods(foods, "   ") == foods
    assert filter_foods(foods, None) == foods


def test_no_match():
    assert filter_foods(get_sample_foods(), "pizza") == []


def test_catalog_is_seeded_once(db_path):
    foods = database.list_foods()
    assert len(foods) == len(get_sample_foods())
    assert database.seed_foods() == 0

    ghee = next(f for f in foods if f["name"] == "Ghee")
    assert ghee["rasa"] == ["Sweet"]
    assert "Increases Kapha" in ghee["dosha_effects"]
    # alphabetical
    assert [f["name"] for f in foods] == sorted((f["name"] for f in foods), key=str.lower)
