import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Supabase (default note store)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")

# Note store backend: "supabase" or "postgres"
NOTE_STORE_BACKEND = os.getenv("NOTE_STORE_BACKEND", "supabase").lower()

# Public URL used to build share links
APP_URL = os.getenv("APP_URL", "http://localhost:3000").rstrip("/")

# CORS
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# Rate limiting
REDIS_URL = os.getenv("REDIS_URL")
RATE_LIMIT_SWEEP_SECONDS = float(os.getenv("RATE_LIMIT_SWEEP_SECONDS", "60"))
# Only honour X-Forwarded-For / X-Real-IP / CF-Connecting-IP behind a trusted proxy
TRUST_PROXY_HEADERS = os.getenv("TRUST_PROXY_HEADERS", "true").lower() in ("1", "true", "yes")

# Password hashing
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
PASSWORD_FAILURE_DELAY_SECONDS = float(os.getenv("PASSWORD_FAILURE_DELAY_SECONDS", "1.0"))

# Owner capability tokens (disabled when unset)
NOTE_TOKEN_SECRET = os.getenv("NOTE_TOKEN_SECRET")

# Database table names
NOTES_TABLE = "notes"

# Short code configuration
SHORT_CODE_LENGTH = 8
SHORT_CODE_MIN_LENGTH = 6
SHORT_CODE_MAX_LENGTH = 8
CUSTOM_CODE_MAX_LENGTH = 50
SHORT_CODE_GENERATION_ATTEMPTS = 5

# Note content limits
NOTE_MAX_SIZE_BYTES = 1024 * 1024  # 1 MB
NOTE_MAX_SIZE_CHARS = 100_000

# Password configuration
PASSWORD_MIN_LENGTH = 4
PASSWORD_MAX_LENGTH = 100

# Requests per window (seconds), keyed by rate limit bucket
RATE_LIMITS = {
    "create_note": (120, 60),  # allows fast auto-save
    "update_note": (120, 60),
    "verify_password": (10, 60),
    "fetch_note": (60, 60),
    "check_code": (60, 60),
}
