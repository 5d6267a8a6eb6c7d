from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv

from config import load_settings

from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_container() -> Container:
    load_dotenv(override=False)
    settings = load_settings()

    logging.config.dictConfig(getattr(settings, "LOGGING"))

    db_config = getattr(settings, "DB_CONFIG")
    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings.__name__,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        logger.info("Demo seed ready")

    return build_container(
        db_config=db_config,
        employee_defaults=getattr(settings, "EMPLOYEE_DEFAULTS", None),
        compliance_thresholds=getattr(settings, "COMPLIANCE_THRESHOLDS", None),
    )
