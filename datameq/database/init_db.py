"""
Database Initialization - Create the allocation tables.

Run directly to create the schema in the configured database:

    python -m datameq.database.init_db
"""
from typing import Optional

from datameq.core.logging_config import get_logger
from datameq.database.connection import DatabaseConnection, get_database
from datameq.database.models import Base

logger = get_logger(__name__)


def init_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Create allocation tables if they don't exist.

    Returns:
        True if tables were created successfully
    """
    db = db or get_database()
    try:
        Base.metadata.create_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to initialize allocation tables: {e}")
        raise
    logger.info("Allocation tables initialized successfully")
    return True


def drop_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Drop allocation tables (destroys all pools, users and logs).

    Returns:
        True if tables were dropped successfully
    """
    db = db or get_database()
    try:
        Base.metadata.drop_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to drop allocation tables: {e}")
        raise
    logger.warning("Allocation tables dropped")
    return True


if __name__ == "__main__":
    print("Initializing allocation tables...")
    init_tables()
    print("Done!")
