import os
from dotenv import load_dotenv

# Load .env from project root (same folder as main.py)
load_dotenv()

DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

SECRET_KEY = os.getenv("SECRET_KEY", "ayurdiet-dev-secret")
SESSION_SECRET = os.getenv("SESSION_SECRET", SECRET_KEY)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ayurdiet.db")
DATABASE_PATH = os.getenv("DATABASE_PATH", DATABASE_URL.replace("sqlite:///", "", 1) if DATABASE_URL.startswith("sqlite:///") else "ayurdiet.db")

# AI provider keys, models and AI_TIMEOUT_SECONDS are read by services/llm.py
# on every call (GEMINI_*, GROQ_*, OPENROUTER_*).

# Recommendations are saved with this priority unless the caller says otherwise
DEFAULT_RECOMMENDATION_PRIORITY = os.getenv("DEFAULT_RECOMMENDATION_PRIORITY", "medium")
