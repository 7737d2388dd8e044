import json

import pytest
from fastapi.testclient import TestClient

import database

AI_ENV_KEYS = ("GEMINI_API_KEY", "GROQ_API_KEY", "OPENROUTER_API_KEY")

PATIENT = {
    "name": "Asha Rao",
    "age": 42,
    "gender": "female",
    "prakriti": "vata_pitta",
    "health_conditions": ["Hypertension", "Acidity"],
    "dietary_habits": "Skips breakfast",
    "digestion_quality": "Moderate",
    "bowel_pattern": "Irregular",
    "water_intake_liters": 1.5,
    "meal_preferences": ["Vegetarian"],
    "allergies": ["Peanuts"],
    "lifestyle_notes": "Desk job, sleeps late",
}

MEAL_PLAN_TEXT = "```json\n" + json.dumps({
    "patient_name": "Asha Rao",
    "prakriti": "vata_pitta",
    "health_conditions": ["Hypertension"],
    "meal_plan": {
        "introduction": "A cooling, grounding day plan.",
        "water_intake_recommendation": "2 litres of warm water",
        "meals": [
            {
                "meal_name": "Breakfast",
                "timing": "7:30 AM",
                "food_items": [
                    {
                        "item": "Stewed apples",
                        "portion_size": "1 bowl",
                        "ayurvedic_properties": {"rasa": "Sweet", "dosha_effect": "Pacifies Vata"},
                        "nutritional_breakdown": {"calories": "120 kcal"},
                    }
                ],
            },
            {"meal_name": "Lunch", "food_items": [{"item": "Mung dal kitchari", "portion_size": "1 cup"}]},
        ],
    },
}) + "\n```"


@pytest.fixture(autouse=True)
def no_ai_keys(monkeypatch):
    for key in AI_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "ayurdiet-test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", path)
    database.init_database()
    return path


@pytest.fixture
def client(db_path):
    from main import app

    with TestClient(app) as c:
        yield c


def register(client, email="vaidya@example.com", password="secret123"):
    return client.post("/register", data={"email": email, "password": password}, follow_redirects=False)


@pytest.fixture
def auth_client(client):
    r = register(client)
    assert r.status_code == 303
    return client


@pytest.fixture
def patient_id(auth_client):
    user = database.get_user_by_email("vaidya@example.com")
    return database.create_patient(user["id"], PATIENT)
