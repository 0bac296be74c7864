"""SQLAlchemy 2.0 engine and session wiring.

``create_app()`` builds one engine per application and keeps the session
factory on ``app.state``; nothing here holds a connection at import time.
"""

from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from readit.config import Settings, get_settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


def create_db_engine(settings: Optional[Settings] = None) -> Engine:
    """Create a SQLite engine for ``READIT_DB_PATH``.

    Args:
        settings: Application settings. Defaults to the cached settings.

    Returns:
        A new SQLAlchemy engine.
    """
    settings = settings or get_settings()
    return create_engine(
        f"sqlite:///{settings.READIT_DB_PATH}",
        connect_args={"check_same_thread": False},
        echo=settings.READIT_DEBUG,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables defined by ORM models on ``engine``."""
    # Import tables so they register with Base.metadata
    import readit.models.tables  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding a session from the app's own factory."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
