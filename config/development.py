import os

from .config import *  # noqa: F401,F403
from .config import env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", True)

# Local dashboards run without Microsoft sign-in unless asked for.
AUTH_REQUIRED = env_bool("AUTH_REQUIRED", False)

AUTO_CLOCK_OUT_ENABLED = env_bool("AUTO_CLOCK_OUT_ENABLED", True)
