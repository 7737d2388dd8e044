"""Main FastAPI application for the AyurDiet AI practitioner portal.

 - Practitioner sign-up / sign-in (session cookie)
 - Patient profiles with prakriti + health details (SQLite)
 - Ayurvedic food reference catalog with search
 - AI diet charts (meal plan / dietary advice) normalized for display
 - Printable PDF export of a stored diet chart
"""

from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request, Form
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
import uvicorn

import config
from passlib.context import CryptContext
from starlette.middleware.sessions import SessionMiddleware

from database import (
    init_database,
    create_user,
    get_user_by_email,
    get_user_by_id,
    create_patient,
    list_patients,
    get_patient,
    delete_patient,
    list_foods,
    list_recommendations,
    get_dashboard_counts,
)
from services.display import meal_glyph, format_prakriti, dosha_tone, join_conditions
from services.foods import filter_foods
from services.llm import GenerationError
from services.normalizer import normalize_recommendation
from services.patients import build_patient_record, PatientValidationError, GENDERS, PRAKRITI_TYPES
from services.prompts import RECOMMENDATION_TYPES
from services.recommendations import generate_for_patient, load_recommendation
from services.reporting import build_recommendation_pdf
from services.schemas import NormalizeRequest

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("ayurdiet")

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    logger.info("Database initialized")
    yield


app = FastAPI(title="AyurDiet AI", version="1.0.0", lifespan=lifespan)
# Session cookie signing key. Keep stable across restarts or users will be logged out.
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SESSION_SECRET,
    same_site="lax",
)


def _uid(request: Request) -> int | None:
    return request.session.get("uid")

def _require_user(request: Request) -> int | None:
    """Signed-in practitioner id. A session pointing at a missing account is cleared."""
    uid = _uid(request)
    if uid and get_user_by_id(uid) is None:
        request.session.clear()
        return None
    return uid

def _not_authenticated() -> JSONResponse:
    return JSONResponse({'error': 'not_authenticated'}, status_code=401)

def _hash_password(pw: str) -> str:
    return pwd_context.hash(pw)

def _verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return pwd_context.verify(pw, pw_hash)
    except ValueError:
        return False

templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))
templates.env.globals.update(
    meal_glyph=meal_glyph,
    format_prakriti=format_prakriti,
    dosha_tone=dosha_tone,
    join_conditions=join_conditions,
)


def _render(request: Request, name: str, *, show_nav: bool, active_tab: str | None = None, status_code: int = 200, **extra):
    """Render a template with the common context.

    show_nav: hide the nav bar on landing + auth pages.
    active_tab: highlight current tab.
    """
    ctx = {"show_nav": show_nav, "active_tab": active_tab}
    ctx.update(extra)
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def _diet_chart_page(request: Request, uid: int, *, selected=None, status_code: int = 200, **extra):
    return _render(
        request,
        "diet_chart.html",
        show_nav=True,
        active_tab="diet",
        status_code=status_code,
        patients=list_patients(uid, order_by="name"),
        selected=selected,
        recommendation_types=RECOMMENDATION_TYPES,
        **extra,
    )


static_dir = os.path.join(BASE_DIR, "static")
os.makedirs(static_dir, exist_ok=True)
app.mount("/static", StaticFiles(directory=static_dir), name="static")


# Routes
@app.get("/", response_class=HTMLResponse)
async def landing_page(request: Request):
    """Landing page."""
    return _render(request, "index.html", show_nav=False)


@app.get("/login", response_class=HTMLResponse)
async def login_get(request: Request):
    return _render(request, "login.html", show_nav=False, title="Sign in")

@app.post("/login")
async def login_post(request: Request, email: str = Form(...), password: str = Form(...)):
    user = get_user_by_email(email)
    if not user or not _verify_password(password, user["password_hash"]):
        return _render(request, "login.html", show_nav=False, title="Sign in", error="Invalid email or password.")
    request.session["uid"] = int(user["id"])
    return RedirectResponse("/dashboard", status_code=303)

@app.get("/register", response_class=HTMLResponse)
async def register_get(request: Request):
    return _render(request, "register.html", show_nav=False, title="Create account")

@app.post("/register")
async def register_post(request: Request, email: str = Form(...), password: str = Form(...)):
    if get_user_by_email(email):
        return _render(request, "register.html", show_nav=False, title="Create account", error="Email already registered. Please sign in.")
    if len(password) < 6:
        return _render(request, "register.html", show_nav=False, title="Create account", error="Password must be at least 6 characters.")
    uid = int(create_user(email, _hash_password(password)))
    request.session["uid"] = uid
    return RedirectResponse("/dashboard", status_code=303)

@app.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=303)


@app.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Main dashboard page."""
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    counts = get_dashboard_counts(uid)
    recent = list_patients(uid)[:5]
    return _render(request, "dashboard.html", show_nav=True, active_tab="home", counts=counts, recent_patients=recent)


# ------------------------------------------------------------ patients

@app.get("/patients", response_class=HTMLResponse)
async def patients_page(request: Request):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    return _render(
        request, "patients.html", show_nav=True, active_tab="patients",
        patients=list_patients(uid), genders=GENDERS, prakriti_types=PRAKRITI_TYPES,
    )

@app.post("/patients")
async def patients_create(
    request: Request,
    name: str = Form(""),
    age: str = Form(""),
    gender: str = Form(""),
    prakriti: str = Form(""),
    health_conditions: str = Form(""),
    dietary_habits: str = Form(""),
    digestion_quality: str = Form(""),
    bowel_pattern: str = Form(""),
    water_intake_liters: str = Form(""),
    meal_preferences: str = Form(""),
    allergies: str = Form(""),
    lifestyle_notes: str = Form(""),
):
    """Create a patient profile from the form."""
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    form = {
        'name': name,
        'age': age,
        'gender': gender,
        'prakriti': prakriti,
        'health_conditions': health_conditions,
        'dietary_habits': dietary_habits,
        'digestion_quality': digestion_quality,
        'bowel_pattern': bowel_pattern,
        'water_intake_liters': water_intake_liters,
        'meal_preferences': meal_preferences,
        'allergies': allergies,
        'lifestyle_notes': lifestyle_notes,
    }
    try:
        record = build_patient_record(form)
    except PatientValidationError as e:
        return _render(
            request, "patients.html", show_nav=True, active_tab="patients", status_code=400,
            patients=list_patients(uid), genders=GENDERS, prakriti_types=PRAKRITI_TYPES,
            error=str(e), form=form,
        )
    patient_id = create_patient(uid, record)
    logger.info("Created patient %s for user %s", patient_id, uid)
    return RedirectResponse("/patients", status_code=303)

@app.post("/patients/{patient_id}/delete")
async def patients_delete(request: Request, patient_id: int):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    delete_patient(uid, patient_id)
    return RedirectResponse("/patients", status_code=303)

@app.get("/api/patients")
async def api_patients(request: Request, order: str = "created"):
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    return {"patients": list_patients(uid, order_by=order)}

@app.get("/api/patients/{patient_id}")
async def api_patient(request: Request, patient_id: int):
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    patient = get_patient(uid, patient_id)
    if not patient:
        return JSONResponse({"error": "Patient not found"}, status_code=404)
    return {"patient": patient}

@app.delete("/api/patients/{patient_id}")
async def api_patient_delete(request: Request, patient_id: int):
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    if not delete_patient(uid, patient_id):
        return JSONResponse({"error": "Patient not found"}, status_code=404)
    return {"ok": True}

@app.get("/api/patients/{patient_id}/recommendations")
async def api_patient_recommendations(request: Request, patient_id: int):
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    if not get_patient(uid, patient_id):
        return JSONResponse({"error": "Patient not found"}, status_code=404)
    return {"recommendations": list_recommendations(patient_id)}


# --------------------------------------------------------------- foods

@app.get("/foods", response_class=HTMLResponse)
async def foods_page(request: Request, q: str = ""):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    results = filter_foods(list_foods(), q)
    return _render(request, "foods.html", show_nav=True, active_tab="foods", title="Food Database", q=q, foods=results)

@app.get("/api/foods")
async def api_foods(request: Request, q: str = ""):
    """Search the food reference catalog by name or category."""
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    return {"foods": filter_foods(list_foods(), q)}


# --------------------------------------------------------- diet charts

@app.get("/diet-charts", response_class=HTMLResponse)
async def diet_charts_page(request: Request, patient_id: int | None = None):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    selected = get_patient(uid, patient_id) if patient_id else None
    return _diet_chart_page(request, uid, selected=selected)

@app.get("/diet-charts/new/{patient_id}", response_class=HTMLResponse)
async def diet_chart_for_patient(request: Request, patient_id: int):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    selected = get_patient(uid, patient_id)
    if not selected:
        return RedirectResponse('/patients', status_code=303)
    return _diet_chart_page(request, uid, selected=selected)

@app.post("/diet-charts/generate", response_class=HTMLResponse)
async def diet_chart_generate(request: Request, patient_id: int = Form(...), recommendation_type: str = Form("meal_plan")):
    """Generate and render an AI diet chart."""
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    patient = get_patient(uid, patient_id)
    if not patient:
        return _diet_chart_page(request, uid, status_code=404, error="Please select a patient first.")
    try:
        generated = generate_for_patient(patient, recommendation_type)
    except (GenerationError, ValueError) as e:
        logger.error("Failed to generate recommendations for patient %s: %s", patient_id, e)
        return _diet_chart_page(
            request, uid, selected=patient, status_code=502 if isinstance(e, GenerationError) else 400,
            error=f"Failed to generate recommendations: {e}",
        )
    return _diet_chart_page(
        request, uid, selected=patient,
        result=generated["result"], recommendation_id=generated["recommendation_id"],
        saved=generated["saved"], recommendation_type=recommendation_type,
    )

@app.post("/api/recommendations")
async def api_generate_recommendation(request: Request, patient_id: int = Form(...), recommendation_type: str = Form("meal_plan")):
    """Generate an AI recommendation for a patient (JSON)."""
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    patient = get_patient(uid, patient_id)
    if not patient:
        return JSONResponse({"error": "Patient not found"}, status_code=404)
    try:
        return generate_for_patient(patient, recommendation_type)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except GenerationError as e:
        logger.error("Failed to generate recommendations for patient %s: %s", patient_id, e)
        return JSONResponse({"error": str(e)}, status_code=502)

@app.get("/api/recommendations/{recommendation_id}")
async def api_recommendation(request: Request, recommendation_id: int):
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    rec = load_recommendation(uid, recommendation_id)
    if not rec:
        return JSONResponse({"error": "Recommendation not found"}, status_code=404)
    return rec

@app.get("/recommendations/{recommendation_id}", response_class=HTMLResponse)
async def recommendation_page(request: Request, recommendation_id: int):
    uid = _require_user(request)
    if not uid:
        return RedirectResponse('/login', status_code=303)
    rec = load_recommendation(uid, recommendation_id)
    if not rec:
        return RedirectResponse('/diet-charts', status_code=303)
    patient = get_patient(uid, rec["patient_id"])
    return _diet_chart_page(
        request, uid, selected=patient,
        result=rec["result"], recommendation_id=recommendation_id, saved=True,
        recommendation_type=rec["recommendation_type"],
    )

@app.get("/api/recommendations/{recommendation_id}/report.pdf")
async def recommendation_pdf(request: Request, recommendation_id: int):
    """Download a printable diet chart."""
    uid = _require_user(request)
    if not uid:
        return _not_authenticated()
    rec = load_recommendation(uid, recommendation_id)
    if not rec:
        return JSONResponse({"error": "Recommendation not found"}, status_code=404)
    patient = get_patient(uid, rec["patient_id"]) or {}
    pdf_bytes = build_recommendation_pdf(patient, rec["result"], created_at=rec.get("created_at"))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename=ayurdiet-chart-{recommendation_id}.pdf"},
    )

@app.post("/api/normalize")
async def api_normalize(payload: NormalizeRequest):
    """Normalize raw AI output without generating or storing anything."""
    return normalize_recommendation(payload.data)


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "AyurDiet AI"}

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=config.DEBUG)
