import os


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


class Config:
    # Cấu hình DB
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = _env_int("DB_PORT", 3306)
    DB_NAME = os.environ.get("DB_NAME", "timeleave_db")

    # Dev helpers
    AUTO_INIT_DB = bool(_env_int("AUTO_INIT_DB", 0))
    AUTO_SEED_DB = bool(_env_int("AUTO_SEED_DB", 0))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Mặc định khi nhân viên chưa có employee_configs
    DEFAULT_DAILY_WORK_HOURS = os.environ.get("DEFAULT_DAILY_WORK_HOURS", "8.00")
    DEFAULT_WEEKLY_WORK_HOURS = os.environ.get("DEFAULT_WEEKLY_WORK_HOURS", "40.00")
    DEFAULT_WORK_DAYS = os.environ.get("DEFAULT_WORK_DAYS", "1,2,3,4,5")
    DEFAULT_VACATION_DAYS_PER_YEAR = _env_int("DEFAULT_VACATION_DAYS_PER_YEAR", 30)
    DEFAULT_VACATION_CARRY_OVER_MAX = _env_int("DEFAULT_VACATION_CARRY_OVER_MAX", 10)

    @staticmethod
    def get_logging_config(level: str, fmt: str) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": fmt,
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": level,
                "handlers": ["default"],
            },
        }


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = bool(_env_int("DEBUG", 0))

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB

LOG_LEVEL = Config.LOG_LEVEL
LOG_FORMAT = Config.LOG_FORMAT
LOGGING = Config.get_logging_config(LOG_LEVEL, LOG_FORMAT)

EMPLOYEE_DEFAULTS = {
    "daily_work_hours": Config.DEFAULT_DAILY_WORK_HOURS,
    "weekly_work_hours": Config.DEFAULT_WEEKLY_WORK_HOURS,
    "work_days": Config.DEFAULT_WORK_DAYS,
    "vacation_days_per_year": Config.DEFAULT_VACATION_DAYS_PER_YEAR,
    "vacation_carry_over_max": Config.DEFAULT_VACATION_CARRY_OVER_MAX,
}

# Override statutory thresholds, e.g. {"max_work_minutes": 600}. Empty keeps the law's defaults.
COMPLIANCE_THRESHOLDS: dict = {}
