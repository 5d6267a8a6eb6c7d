import importlib
import os
from types import ModuleType

_ENV_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    # APP_ENV chọn module cấu hình; giá trị lạ rơi về development
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ENV_MODULES.get(env, "config.development")


def load_settings() -> ModuleType:
    return importlib.import_module(get_settings_module())
