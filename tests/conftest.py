"""
Shared test fixtures: SQLite database, aggregate specs, strand patterns.
"""

import os
import pytest

# Point storage at the test database before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from precast_qa.database import Base, SessionLocal, engine
from precast_qa.gradation.sieves import default_aggregates


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def keystone():
    return default_aggregates()["Keystone #7"]


@pytest.fixture
def concrete_sand():
    return default_aggregates()["Concrete Sand"]

