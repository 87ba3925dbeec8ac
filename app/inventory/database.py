"""
Database configuration and session management.

This module sets up the SQLAlchemy engine and session factory. The engine
(and its connection pool) is created once per process and shared by every
request.
"""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

# Base class for declarative models
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are shared across the threadpool FastAPI runs sync
    dependencies in, so thread checking is disabled for them. Other
    backends get a small pre-pinged pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=echo,
    )


@lru_cache
def get_engine() -> Engine:
    """Get the process-wide engine built from settings."""
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.sql_debug)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory bound to the process-wide engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: SQLAlchemy database session
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine | None = None) -> None:
    """
    Create the books table if it does not exist yet.

    Args:
        engine: Engine to create tables on. Defaults to the process-wide one.
    """
    # Import models to ensure they are registered with Base
    from . import models_db  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
