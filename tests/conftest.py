"""Shared pytest fixtures for serenity tests."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from serenity.db.schema import Base
from serenity.store.memory import InMemoryKeyValueStore


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def day_one():
    """A fixed instant used as "now" in aggregator tests."""
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)

