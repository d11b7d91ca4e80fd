import os

from config.config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
