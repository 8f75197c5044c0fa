import os

from .config import *  # noqa: F401,F403
from .config import env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", False)

AUTH_REQUIRED = env_bool("AUTH_REQUIRED", True)

AUTO_CLOCK_OUT_ENABLED = env_bool("AUTO_CLOCK_OUT_ENABLED", True)

SESSION_COOKIE_SECURE = env_bool("SESSION_COOKIE_SECURE", True)
