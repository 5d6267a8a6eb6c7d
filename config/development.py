import os

from .config import *  # noqa: F401,F403
from .config import Config

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
LOGGING = Config.get_logging_config(LOG_LEVEL, Config.LOG_FORMAT)

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
