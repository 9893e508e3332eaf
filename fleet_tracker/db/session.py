from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from fleet_tracker.core.config import settings

# Create database engine shared by request handlers and the simulator
db_url = str(settings.SQLALCHEMY_DATABASE_URI)
engine = create_engine(
    db_url,
    pool_pre_ping=True  # Test connections for liveness when checked out from pool
)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for declarative class definitions
Base = declarative_base()
