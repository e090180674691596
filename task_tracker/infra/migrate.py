from __future__ import annotations

import logging
import os
import sys

from alembic import command
from alembic.config import Config

from task_tracker.infra.db import DATABASE_URL
from task_tracker.infra.log_config import configure_logging

ALEMBIC_CONFIG = os.getenv("ALEMBIC_CONFIG", "alembic.ini")

logger = logging.getLogger(__name__)


def _config(database_url: str | None = None) -> Config:
    config = Config(ALEMBIC_CONFIG)
    # Keep the application's logging setup instead of alembic.ini's.
    config.attributes["configure_logger"] = False
    config.set_main_option("sqlalchemy.url", (database_url or DATABASE_URL).replace("%", "%%"))
    return config


def upgrade(revision: str = "head", database_url: str | None = None) -> None:
    logger.info("upgrading task schema to %s", revision)
    command.upgrade(_config(database_url), revision)


def downgrade(revision: str, database_url: str | None = None) -> None:
    logger.info("downgrading task schema to %s", revision)
    command.downgrade(_config(database_url), revision)


if __name__ == "__main__":
    configure_logging()
    upgrade(sys.argv[1] if len(sys.argv) > 1 else "head")
