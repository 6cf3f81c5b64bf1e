"""
Create or upgrade the ReWear schema.

Creates any missing tables, then adds the indexes that guard concurrent
writes on databases created before they existed. Run from the backend
directory::

    python run_migration.py
"""

import sys
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from rewear.core.logging import get_logger, setup_logging
from rewear.database import engine
from rewear.models.base import Base
from rewear.config import settings

logger = get_logger("rewear.migration")

# Index name -> DDL that creates it on an existing table
GUARD_INDEXES = {
    "uq_swaps_pending_item_pair": """
        CREATE UNIQUE INDEX IF NOT EXISTS uq_swaps_pending_item_pair
        ON swaps (item_pair_key)
        WHERE status = 'pending'
    """,
    "uq_ratings_rater_rated_transaction": """
        CREATE UNIQUE INDEX IF NOT EXISTS uq_ratings_rater_rated_transaction
        ON ratings (rater_id, rated_user_id, transaction_type, transaction_id)
    """,
}


def _existing_indexes(conn, table: str) -> set:
    inspector = inspect(conn)
    names = {ix["name"] for ix in inspector.get_indexes(table)}
    names.update(uc["name"] for uc in inspector.get_unique_constraints(table) if uc.get("name"))
    return names


def run_migration():
    """Create missing tables and guard indexes"""
    logger.info(f"Running migration against {settings.db_driver}://{settings.db_host}/{settings.db_name}")

    try:
        Base.metadata.create_all(bind=engine)

        with engine.begin() as conn:
            present = _existing_indexes(conn, "swaps") | _existing_indexes(conn, "ratings")
            for name, ddl in GUARD_INDEXES.items():
                if name in present:
                    logger.info(f"Index {name} already present")
                    continue
                conn.execute(text(ddl))
                logger.info(f"Created index {name}")

        logger.info("Migration completed successfully")

    except SQLAlchemyError as e:
        logger.error(f"Error running migration: {e}")
        sys.exit(1)


if __name__ == "__main__":
    setup_logging()
    run_migration()
