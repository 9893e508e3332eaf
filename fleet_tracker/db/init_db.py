import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fleet_tracker.db.session import engine as default_engine
from fleet_tracker.models import Trip, Vehicle

logger = logging.getLogger(__name__)

def init_db(engine: Optional[Engine] = None):
    """
    Initialize the database by creating the vehicle and trip tables.
    Existing tables are left untouched.
    """
    engine = engine or default_engine
    try:
        tables = [Vehicle.__table__, Trip.__table__]
        for table in tables:
            table.create(engine, checkfirst=True)
            logger.info(f"Table {table.name} ready")

        logger.info("Fleet tracker tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating database tables: {e}")
        raise
