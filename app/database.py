"""
Database engine and session factory.
SQLite locally, any SQLAlchemy URL (e.g. PostgreSQL) via DATABASE_URL.
"""
import logging
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL") or settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

IS_SQLITE = DATABASE_URL.lower().startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={
        "check_same_thread": False  # SQLite multi-thread
    } if IS_SQLITE else {
        "connect_timeout": 10,
    },
    echo=False,
    pool_pre_ping=True,
    **({} if IS_SQLITE else {"pool_size": 5, "max_overflow": 10, "pool_recycle": 3600}),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection() -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.warning(f"[DB] Database connection failed (continuing): {e}")
        return False


def init_db() -> bool:
    """Create tables for every registered model - NON-BLOCKING."""
    try:
        from app.db.base import Base
        import app.models  # noqa: F401  registers models on Base

        Base.metadata.create_all(bind=engine)
        logger.info("[DB] Database tables initialized")
        return True
    except Exception as e:
        logger.warning(f"[DB] Database init warning: {e}")
        return False


def close_db_connection() -> None:
    """Close database connections."""
    engine.dispose()
    logger.info("[DB] Database connections closed")
