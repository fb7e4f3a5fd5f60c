import os
from dotenv import load_dotenv

load_dotenv()

# --- Environment ---
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
COOKIE_SECURE = ENVIRONMENT == "production"

# --- Secrets ---
# Also used to derive the key that encrypts the stored AI API key
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret-key")

# --- Sessions ---
SESSION_COOKIE_NAME = "session_token"
SESSION_EXPIRY_DAYS = int(os.getenv("SESSION_EXPIRY_DAYS", "7"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# --- Database ---
# Default to local SQLite, but prefer environment variable (Postgres in production)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/flightcal.db")

# Hosted Postgres URLs come as postgres://; route them to the psycopg 3 driver
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg://", 1)
elif DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+psycopg://", 1)

# --- Bootstrap ---
DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")

# --- AI report ---
DEFAULT_AI_MODEL = os.getenv("DEFAULT_AI_MODEL", "gpt-3.5-turbo")
# Seconds; unset means the outbound call waits indefinitely
_ai_timeout = os.getenv("AI_REQUEST_TIMEOUT", "")
AI_REQUEST_TIMEOUT = float(_ai_timeout) if _ai_timeout else None

# --- Offline client ---
OFFLINE_QUEUE_URL = os.getenv("OFFLINE_QUEUE_URL", "sqlite:///./data/offline_queue.db")
SYNC_INTERVAL_SECONDS = float(os.getenv("SYNC_INTERVAL_SECONDS", "30"))
