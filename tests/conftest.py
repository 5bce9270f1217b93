"""Pytest fixtures and configuration for taskrecur tests."""

import pytest
from datetime import date, datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from taskrecur.database.database import Base, get_db
from taskrecur.database.item_recurrence_repository import ItemRecurrenceRepository
from taskrecur.database.recurrence_rule_repository import RecurrenceRuleRepository
from taskrecur.engine.holidays import FixedHolidayOracle
from taskrecur.engine.service import RecurrenceService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from taskrecur.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rule_repository(db_session: Session):
    return RecurrenceRuleRepository(db_session)


@pytest.fixture
def item_repository(db_session: Session):
    return ItemRecurrenceRepository(db_session)


@pytest.fixture
def test_user_id():
    return "test-user-123"


@pytest.fixture
def project_id():
    return "project-1"


@pytest.fixture
def anchor():
    """Monday 2025-01-13, 09:00."""
    return datetime(2025, 1, 13, 9, 0)


@pytest.fixture
def service():
    """Service without holidays."""
    return RecurrenceService()


@pytest.fixture
def new_year_oracle():
    """Holiday oracle with 2025-01-01 (a Wednesday) and 2025-12-25 (a Thursday)."""
    return FixedHolidayOracle([date(2025, 1, 1), date(2025, 12, 25)])


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from taskrecur.api.app import app

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
