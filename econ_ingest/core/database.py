"""
Database connection and session management.

The engine and session factory are created by the application root
(see econ_ingest.core.runtime) and handed to the services that need them.
"""

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from econ_ingest.core.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a database engine for the indicator store.

    Server databases get a pre-pinged connection pool. In-memory SQLite
    shares one connection so every session sees the same database.
    """
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            return create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def create_tables(engine: Engine) -> None:
    """
    Create indicator tables if they don't exist.

    Idempotent - safe to call multiple times.
    """
    logger.info("Creating indicator tables if they don't exist...")
    Base.metadata.create_all(bind=engine)
    logger.info("Indicator tables ready")


def get_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory bound to the given engine."""
    return sessionmaker(autoflush=False, bind=engine)


def get_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a session and close it afterwards (FastAPI dependency style)."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
