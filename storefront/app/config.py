import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JSON_SORT_KEYS = False

    # Backend REST API (product catalog, carts, comments, users)
    BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:4000")
    BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "10"))

    # Comment submission retry
    COMMENT_MAX_ATTEMPTS = int(os.getenv("COMMENT_MAX_ATTEMPTS", "3"))
    COMMENT_RETRY_BASE_DELAY = float(os.getenv("COMMENT_RETRY_BASE_DELAY", "1.0"))

    # Session
    SESSION_REVALIDATE_ON_RESTORE = _flag("SESSION_REVALIDATE_ON_RESTORE", "true")
    SESSION_FILE = os.getenv("SESSION_FILE")  # CLI only; defaults to <instance>/session.json
    DEMO_USER_ID = os.getenv("DEMO_USER_ID", "68f586a57de06319a5ef9d2b")

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))
