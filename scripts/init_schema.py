"""
Initialize database schema from SQLAlchemy models.
Creates all tables defined in the models.

Run with: python scripts/init_schema.py
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

logger = logging.getLogger("init_schema")


def init_schema():
    """Create all database tables from SQLAlchemy models."""
    from sqlalchemy import inspect
    from sqlalchemy.exc import SQLAlchemyError

    # Importing the package registers every model with Base
    from staffhub.models import Base
    from staffhub.database import engine

    logger.info(f"Creating tables on {engine.url!r}")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Schema initialization failed")
        sys.exit(1)

    tables = inspect(engine).get_table_names()
    logger.info(f"Schema ready, {len(tables)} tables:")
    for table in sorted(tables):
        logger.info(f"  - {table}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    init_schema()
