# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy against Cloud SQL MySQL (or any URL in DATABASE_URL).
The engine is only built when the database backend is selected, so the
in-memory backend runs without any DB_* variables.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

Base = declarative_base()

_engine = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def build_engine(url: str) -> Engine:
    """Create an engine for `url`. Pool sizing only applies to server databases."""
    kwargs = {
        "pool_pre_ping": True,       # Auto-reconnect if DB connection drops
        "echo": False,               # Set True to log all SQL queries (debug only)
    }
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=10, max_overflow=20, pool_recycle=1800)
    return create_engine(url, **kwargs)


def get_engine() -> Engine:
    """Lazily build the engine from settings and bind SessionLocal to it."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url())
        SessionLocal.configure(bind=_engine)
    return _engine


def dispose_engine():
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None


def create_tables(engine: Engine = None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.branch_data import BranchDataRow                    # noqa
    from app.models.expected_attendance import ExpectedAttendanceRow    # noqa

    Base.metadata.create_all(bind=engine or get_engine())
