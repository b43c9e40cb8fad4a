# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, and the FastAPI
dependency that provides a DB session per request.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings

# SQLite connections are handed across FastAPI's threadpool workers
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

# pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None) -> None:
    """
    Create every table known to ``Base.metadata`` if it does not exist yet.
    Safe to call on every startup.
    """
    # Register the ORM models on Base.metadata
    import models.user     # noqa: F401
    import models.comment  # noqa: F401

    Base.metadata.create_all(bind=bind or engine, checkfirst=True)
