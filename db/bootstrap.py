import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

# Importing the models registers their tables (and the partial unique index)
import models  # noqa: F401

logger = logging.getLogger(__name__)


def create_db_and_tables(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))
