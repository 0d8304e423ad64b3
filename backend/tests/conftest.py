"""
Shared test fixtures for FabQuote tests

Provides database setup and client creation
"""
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# The app engine must not need a running PostgreSQL; tests use their own engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

from app.main import app  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    """Create all tables for testing using SQLAlchemy metadata"""
    # Import all models to ensure they're registered with Base
    from app.models import Category, Process, Routing, RoutingStep  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    """Drop all tables after testing"""
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Create a fresh database session for each test"""
    create_tables(engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        drop_tables(engine)


@pytest.fixture
def client(db_session):
    """Create a test client with database override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def routing_category(db_session):
    """The 'Sheet Metal' routing category"""
    from tests.factories import create_test_category

    category = create_test_category(db_session, name="Sheet Metal", category_type="routing")
    db_session.commit()
    return category


@pytest.fixture
def processes(db_session):
    """
    Laser cutting and bending, the two steps of the worked pricing example.

    Laser: 30 min setup, 50/h, minimum 40, complexity 1.0
    Bend:  15 min setup, 75/h, minimum 60, complexity 1.2
    """
    from tests.factories import create_test_process

    laser = create_test_process(
        db_session,
        name="Laser Cutting",
        setup_time_minutes="30",
        hourly_rate="50",
        minimum_cost="40",
        complexity_multiplier="1.0",
    )
    bend = create_test_process(
        db_session,
        name="Bending",
        setup_time_minutes="15",
        hourly_rate="75",
        minimum_cost="60",
        complexity_multiplier="1.2",
    )
    db_session.commit()
    return {"laser": laser, "bend": bend}
