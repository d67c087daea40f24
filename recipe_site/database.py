"""Database configuration and session management."""

from collections.abc import Generator
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from recipe_site.config import get_settings

Base: Any = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for the given URL."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(database_url: str) -> sessionmaker:
    """Build a session factory bound to a fresh engine."""
    engine = create_db_engine(database_url)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@lru_cache
def get_session_factory() -> sessionmaker:
    """Session factory for the configured database, built on first use."""
    return create_session_factory(get_settings().require_database_url())


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from recipe_site import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
