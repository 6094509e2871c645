"""Bring the active database to the latest migration revision."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

from app.core.logging_config import configure_logging
from app.core.startup import validate_startup_config
import app.database.db as db_module

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def build_alembic_config(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def init_db() -> None:
    configure_logging()
    validate_startup_config()
    active_url = db_module.get_active_database_url()
    command.upgrade(build_alembic_config(active_url), "head")
    logger.info(
        "database.migrated",
        extra={"event": "database.migrated", "database_url_scheme": active_url.split("://", 1)[0]},
    )


if __name__ == "__main__":
    init_db()
