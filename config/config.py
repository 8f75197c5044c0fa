"""Settings shared by every environment, read from the process environment."""

import os


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_list(name: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "sd_clockin"),
}

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Los_Angeles")
PORT = int(os.getenv("PORT", "5050"))

ALLOWED_ORIGINS = env_list("ALLOWED_ORIGINS")
FRONTEND_URL = os.getenv("FRONTEND_URL", "")

REDIS_URL = os.getenv("REDIS_URL") or None

LOG_FILE = os.getenv("LOG_FILE") or None

# Microsoft Entra ID sign-in
MICROSOFT_TENANT_ID = os.getenv("MICROSOFT_TENANT_ID", "")
MICROSOFT_CLIENT_ID = os.getenv("MICROSOFT_CLIENT_ID", "")
MICROSOFT_CLIENT_SECRET = os.getenv("MICROSOFT_CLIENT_SECRET", "")
MICROSOFT_REDIRECT_URI = os.getenv("MICROSOFT_REDIRECT_URI", "")
MICROSOFT_SCOPES = os.getenv("MICROSOFT_SCOPES", "openid profile email offline_access")
MICROSOFT_ALLOWED_EMAILS = os.getenv("MICROSOFT_ALLOWED_EMAILS", "")
MICROSOFT_ALLOWED_DOMAINS = os.getenv("MICROSOFT_ALLOWED_DOMAINS", "")
MICROSOFT_ALLOWED_GROUP_IDS = os.getenv("MICROSOFT_ALLOWED_GROUP_IDS", "")
ADMIN_SESSION_TTL_SECONDS = int(os.getenv("ADMIN_SESSION_TTL_SECONDS", str(8 * 60 * 60)))

BOOTSTRAP_ADMIN_EMAIL = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "")

AUTO_SEED_DB = env_bool("AUTO_SEED_DB", False)
