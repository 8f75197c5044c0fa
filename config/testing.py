from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

AUTH_REQUIRED = False
AUTO_CLOCK_OUT_ENABLED = False

REDIS_URL = None
LOG_FILE = None
