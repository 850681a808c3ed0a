"""
Database Configuration
SQLAlchemy engine and session management.
Supports both SQLite (local dev) and PostgreSQL (production).
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from stitcher.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine with settings appropriate for the backend."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},  # Needed for SQLite
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def init_db(bind: Engine = None):
    """Initialize database tables."""
    try:
        from stitcher.models import VideoJob  # noqa
        Base.metadata.create_all(bind=bind or engine)
    except Exception as e:
        # Tables may already exist or the filesystem may be read-only
        logger.warning(f"Could not create database tables: {e}")
        logger.info("Continuing with existing database...")
