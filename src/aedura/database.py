"""Database setup for storing user accounts."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared across FastAPI's worker threads
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


# bound parameters carry password hashes; keep them out of exception text and logs
engine = create_engine(
    settings.database_url,
    future=True,
    hide_parameters=True,
    **_engine_kwargs(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def init_db(bind=None) -> None:
    """Create database tables if they do not exist."""
    # imported for its side effect of registering the users table
    from .models import user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
