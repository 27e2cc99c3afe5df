"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from hostel_analytics.api.main import create_app
from hostel_analytics.infrastructure.database.models import Base
from hostel_analytics.infrastructure.database.session import get_db
from hostel_analytics.domain.models import OccupancySample


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory for extra sessions on the test database, e.g. to simulate a concurrent request"""
    return TestingSessionLocal


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_samples(rates_percent: List[int], total_beds: int = 100, end: date | None = None) -> List[OccupancySample]:
    """Consecutive daily samples ending on `end` with the given occupancy percentages"""
    end = end or date.today()
    start = end - timedelta(days=len(rates_percent) - 1)
    return [
        OccupancySample(
            date=start + timedelta(days=i),
            total_beds=total_beds,
            occupied_beds=total_beds * rate // 100,
        )
        for i, rate in enumerate(rates_percent)
    ]


@pytest.fixture
def rising_history() -> List[OccupancySample]:
    """Seven days climbing from 60% to 90% occupancy"""
    return make_samples([60, 65, 70, 75, 80, 85, 90], end=date(2024, 1, 7))


@pytest.fixture
def steady_history() -> List[OccupancySample]:
    """Thirty days flat at 70% occupancy"""
    return make_samples([70] * 30, total_beds=10, end=date(2024, 1, 30))


@pytest.fixture
def history_factory():
    """Build consecutive daily samples from occupancy percentages"""
    return make_samples
