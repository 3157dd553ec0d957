"""
Database session configuration
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets cross-thread access, in-memory SQLite a single shared connection."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=False, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
