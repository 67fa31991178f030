import os
from dotenv import load_dotenv

load_dotenv()

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# --- JWT Configuration ---
# Supabase signs access tokens with the project's JWT secret (HS256).
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "1"))

# --- Backends ---
# "supabase" talks to PostgREST with the caller's token, "sql" uses SQLAlchemy directly.
DATA_BACKEND = os.getenv("DATA_BACKEND", "supabase" if SUPABASE_URL else "sql").lower()
AUTH_BACKEND = os.getenv("AUTH_BACKEND", "supabase" if DATA_BACKEND == "supabase" else "local").lower()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/vicinato.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Application ---
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")
UPCOMING_WINDOW_DAYS = int(os.getenv("UPCOMING_WINDOW_DAYS", "7"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))
PORT = int(os.getenv("PORT", "3001"))
