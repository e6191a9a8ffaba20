import os

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./greasedesk.db")
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

BASE_URL = os.getenv("BASE_URL", os.getenv("NEXTAUTH_URL", "http://localhost:3000")).rstrip("/")
DEV_BOOTSTRAP_ALLOW = _env_flag("DEV_BOOTSTRAP_ALLOW", "")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]
if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Session
SESSION_SECRET = os.getenv("SESSION_SECRET", os.getenv("NEXTAUTH_SECRET", ""))
if not SESSION_SECRET and (IS_DEV or IS_TEST):
    SESSION_SECRET = "dev-session-secret-change-me"
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", "604800"))
SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", "0" if IS_DEV else "1")
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax").strip().lower()
if SESSION_COOKIE_SAMESITE not in {"lax", "strict", "none"}:
    SESSION_COOKIE_SAMESITE = "lax"
SESSION_COOKIE_DOMAIN = os.getenv("SESSION_COOKIE_DOMAIN", "").strip() or None

# Email (Resend)
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "").strip()
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.getenv("EMAIL_FROM", "GreaseDesk <no-reply@greasedesk.com>")
EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "resend" if RESEND_API_KEY else "mock").strip().lower()
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

# Onboarding
VERIFICATION_TOKEN_TTL_HOURS = int(os.getenv("VERIFICATION_TOKEN_TTL_HOURS", "24"))
MIN_PASSWORD_LENGTH = 8

TRIAL_PLAN_NAME = os.getenv("TRIAL_PLAN_NAME", "Core Basic")
TRIAL_STATUS = "grace"
TRIAL_RETENTION_MONTHS = int(os.getenv("TRIAL_RETENTION_MONTHS", "3"))
TRIAL_INCLUDED_SITES = int(os.getenv("TRIAL_INCLUDED_SITES", "1"))

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Europe/London")
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "GBP")
DEFAULT_LOCALE = os.getenv("DEFAULT_LOCALE", "en-GB")
DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "United Kingdom")
