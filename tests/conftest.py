"""Shared test fixtures for Readit."""

import os

# Keep create_app() from touching a database file in the working directory.
os.environ.setdefault("READIT_DB_PATH", ":memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from readit import create_app
from readit.models.database import Base, get_db


@pytest.fixture
def test_db():
    """In-memory SQLite database for isolated tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Import tables so metadata is populated
    import readit.models.tables  # noqa: F401
    Base.metadata.create_all(bind=engine)

    session = TestSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_app(test_db):
    """Create a fresh Readit application bound to the test database."""
    application = create_app()

    def _override_get_db():
        yield test_db

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest.fixture
async def test_client(test_app):
    """Async HTTP test client backed by the test app."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
