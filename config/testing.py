import os

from .config import *  # noqa: F401,F403
from .config import Config

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeleave_test"),
}

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOGGING = Config.get_logging_config(LOG_LEVEL, Config.LOG_FORMAT)

AUTO_INIT_DB = False
AUTO_SEED_DB = False
