import json
import logging
import sqlite3
from contextlib import contextmanager

from config import DATABASE_PATH

logger = logging.getLogger(__name__)

# Columns stored as JSON-encoded lists of strings.
PATIENT_LIST_COLUMNS = ("health_conditions", "meal_preferences", "allergies")
FOOD_LIST_COLUMNS = ("rasa", "guna", "dosha_effects")


def init_database():
    """Initialize the database with required tables."""
    conn = sqlite3.connect(DATABASE_PATH)
    cursor = conn.cursor()

    # Practitioners (email/password auth)
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS patients (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            age INTEGER,
            gender TEXT,
            prakriti TEXT,
            health_conditions TEXT DEFAULT '[]',
            dietary_habits TEXT,
            digestion_quality TEXT,
            bowel_pattern TEXT,
            water_intake_liters REAL,
            meal_preferences TEXT DEFAULT '[]',
            allergies TEXT DEFAULT '[]',
            lifestyle_notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """)

    # Read-only reference catalog
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS foods (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            category TEXT,
            calories REAL,
            protein_g REAL,
            carbs_g REAL,
            fat_g REAL,
            rasa TEXT DEFAULT '[]',
            guna TEXT DEFAULT '[]',
            virya TEXT,
            vipaka TEXT,
            dosha_effects TEXT DEFAULT '[]',
            serving_size TEXT,
            ayurvedic_notes TEXT
        )
    """)

    # Generated recommendations; content is stored opaque
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS recommendations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            patient_id INTEGER NOT NULL,
            recommendation_type TEXT NOT NULL,
            content TEXT NOT NULL,
            priority TEXT DEFAULT 'medium',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (patient_id) REFERENCES patients(id)
        )
    """)

    conn.commit()
    conn.close()

    seeded = seed_foods()
    if seeded:
        logger.info("Seeded %d reference foods", seeded)


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def _decode_lists(row: dict, columns) -> dict:
    for col in columns:
        raw = row.get(col)
        try:
            value = json.loads(raw) if raw else []
        except (TypeError, ValueError):
            value = [raw] if raw else []
        row[col] = value if isinstance(value, list) else [value]
    return row


# ---------------------------------------------------------------- users

def create_user(email: str, password_hash: str) -> int:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("INSERT INTO users (email, password_hash) VALUES (?, ?)", (email.lower().strip(), password_hash))
        conn.commit()
        return cur.lastrowid

def get_user_by_email(email: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT * FROM users WHERE email = ?", (email.lower().strip(),))
        row = cur.fetchone()
        return dict(row) if row else None

def get_user_by_id(user_id: int):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        row = cur.fetchone()
        return dict(row) if row else None


# ------------------------------------------------------------- patients

def create_patient(user_id: int, data: dict) -> int:
    """Insert a patient profile owned by user_id."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO patients (
                user_id, name, age, gender, prakriti, health_conditions,
                dietary_habits, digestion_quality, bowel_pattern,
                water_intake_liters, meal_preferences, allergies, lifestyle_notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            data['name'], data.get('age'), data.get('gender'), data.get('prakriti'),
            json.dumps(data.get('health_conditions') or []),
            data.get('dietary_habits', ''), data.get('digestion_quality', ''),
            data.get('bowel_pattern', ''), data.get('water_intake_liters'),
            json.dumps(data.get('meal_preferences') or []),
            json.dumps(data.get('allergies') or []),
            data.get('lifestyle_notes', ''),
        ))
        conn.commit()
        return cursor.lastrowid


def list_patients(user_id: int, order_by: str = "created"):
    """Patients for a practitioner, newest first or alphabetical."""
    order = "name COLLATE NOCASE ASC" if order_by == "name" else "created_at DESC, id DESC"
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(f"SELECT * FROM patients WHERE user_id = ? ORDER BY {order}", (user_id,))
        return [_decode_lists(dict(r), PATIENT_LIST_COLUMNS) for r in cur.fetchall()]


def get_patient(user_id: int, patient_id: int):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT * FROM patients WHERE id = ? AND user_id = ?", (patient_id, user_id))
        row = cur.fetchone()
        return _decode_lists(dict(row), PATIENT_LIST_COLUMNS) if row else None


def delete_patient(user_id: int, patient_id: int) -> bool:
    """Delete a patient and every recommendation generated for them."""
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT id FROM patients WHERE id = ? AND user_id = ?", (patient_id, user_id))
        if cur.fetchone() is None:
            return False
        cur.execute("DELETE FROM recommendations WHERE patient_id = ?", (patient_id,))
        cur.execute("DELETE FROM patients WHERE id = ?", (patient_id,))
        conn.commit()
        return True


# ---------------------------------------------------------------- foods

def seed_foods(foods=None) -> int:
    """Fill the foods table from the bundled catalog if it is empty."""
    if foods is None:
        from services.foods import get_sample_foods
        foods = get_sample_foods()
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM foods")
        if cur.fetchone()[0]:
            return 0
        for f in foods:
            cur.execute("""
                INSERT INTO foods (
                    name, category, calories, protein_g, carbs_g, fat_g,
                    rasa, guna, virya, vipaka, dosha_effects, serving_size, ayurvedic_notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                f['name'], f.get('category', ''),
                f.get('calories', 0), f.get('protein_g', 0), f.get('carbs_g', 0), f.get('fat_g', 0),
                json.dumps(f.get('rasa', [])), json.dumps(f.get('guna', [])),
                f.get('virya', ''), f.get('vipaka', ''),
                json.dumps(f.get('dosha_effects', [])),
                f.get('serving_size', ''), f.get('ayurvedic_notes', ''),
            ))
        conn.commit()
        return len(foods)


def list_foods():
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT * FROM foods ORDER BY name COLLATE NOCASE ASC")
        return [_decode_lists(dict(r), FOOD_LIST_COLUMNS) for r in cur.fetchall()]


# ------------------------------------------------------ recommendations

def save_recommendation(patient_id: int, recommendation_type: str, content: dict, priority: str = "medium") -> int:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO recommendations (patient_id, recommendation_type, content, priority) VALUES (?, ?, ?, ?)",
            (patient_id, recommendation_type, json.dumps(content), priority),
        )
        conn.commit()
        return cur.lastrowid


def _decode_recommendation(row) -> dict:
    rec = dict(row)
    try:
        rec['content'] = json.loads(rec.get('content') or '{}')
    except ValueError:
        rec['content'] = {'recommendation': rec.get('content')}
    return rec


def get_recommendation(user_id: int, recommendation_id: int):
    """Fetch a recommendation, only if its patient belongs to user_id."""
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("""
            SELECT r.* FROM recommendations r
            JOIN patients p ON p.id = r.patient_id
            WHERE r.id = ? AND p.user_id = ?
        """, (recommendation_id, user_id))
        row = cur.fetchone()
        return _decode_recommendation(row) if row else None


def list_recommendations(patient_id: int):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT * FROM recommendations WHERE patient_id = ? ORDER BY created_at DESC, id DESC",
            (patient_id,),
        )
        return [_decode_recommendation(r) for r in cur.fetchall()]


def get_dashboard_counts(user_id: int) -> dict:
    """Counts shown on the dashboard cards."""
    with get_db() as conn:
        c = conn.cursor()
        c.execute("SELECT COUNT(*) FROM patients WHERE user_id = ?", (user_id,))
        patients = c.fetchone()[0]
        c.execute("""
            SELECT COUNT(*) FROM recommendations r
            JOIN patients p ON p.id = r.patient_id WHERE p.user_id = ?
        """, (user_id,))
        charts = c.fetchone()[0]
        c.execute("SELECT COUNT(*) FROM foods")
        foods = c.fetchone()[0]
        return {"patients": patients, "diet_charts": charts, "foods": foods}
