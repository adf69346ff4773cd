"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("EMAIL_API_URL", "")

import uuid
import pytest
from decimal import Decimal
from typing import Callable, Generator
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fleet_deductions.api.main import create_app
from fleet_deductions.api.dependencies import get_email_client
from fleet_deductions.domain.enums import DriverStatus, UserRole
from fleet_deductions.infrastructure.clients.email import EmailClient
from fleet_deductions.infrastructure.database.models import Base, Driver, Franchise, Penalty, Trip, User
from fleet_deductions.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


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
def email_client() -> AsyncMock:
    """Mail relay stand-in that accepts every message"""
    client = AsyncMock(spec=EmailClient)
    client.send_penalty_notification.return_value = True
    return client


@pytest.fixture
def client(db: Session, email_client: AsyncMock) -> TestClient:
    """Create FastAPI test client with test database and mocked mail relay"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_client] = lambda: email_client
    return TestClient(app)


def _persist(db: Session, obj):
    db.add(obj)
    db.commit()
    return obj


@pytest.fixture
def franchise(db: Session) -> Franchise:
    return _persist(db, Franchise(name="Central Franchise"))


@pytest.fixture
def other_franchise(db: Session) -> Franchise:
    return _persist(db, Franchise(name="North Franchise"))


@pytest.fixture
def admin_user(db: Session) -> User:
    return _persist(db, User(full_name="Asha Admin", email="admin@fleet.test", role=UserRole.ADMIN.value))


@pytest.fixture
def manager_user(db: Session, franchise: Franchise) -> User:
    return _persist(
        db,
        User(
            full_name="Manoj Manager",
            email="manager@fleet.test",
            role=UserRole.MANAGER.value,
            franchise_id=franchise.id,
        ),
    )


@pytest.fixture
def staff_user(db: Session, franchise: Franchise) -> User:
    return _persist(
        db,
        User(full_name="Sam Staff", email="staff@fleet.test", role=UserRole.STAFF.value, franchise_id=franchise.id),
    )


@pytest.fixture
def driver(db: Session, franchise: Franchise) -> Driver:
    """Active driver with a 500 incentive balance"""
    return _persist(
        db,
        Driver(
            driver_code="DRV-001",
            first_name="Ravi",
            last_name="Kumar",
            phone="+919800000001",
            email="ravi@fleet.test",
            franchise_id=franchise.id,
            status=DriverStatus.ACTIVE.value,
            incentive=Decimal("500"),
        ),
    )


@pytest.fixture
def second_driver(db: Session, franchise: Franchise) -> Driver:
    """Second active driver in the same franchise, incentive 200"""
    return _persist(
        db,
        Driver(
            driver_code="DRV-002",
            first_name="Anita",
            last_name="Rao",
            phone="+919800000002",
            email="anita@fleet.test",
            franchise_id=franchise.id,
            status=DriverStatus.ACTIVE.value,
            incentive=Decimal("200"),
        ),
    )


@pytest.fixture
def trip(db: Session, driver: Driver) -> Trip:
    return _persist(db, Trip(driver_id=driver.id, customer_name="Meera Iyer", pickup_location="MG Road"))


@pytest.fixture
def make_penalty(db: Session) -> Callable[..., Penalty]:
    """Factory for penalties persisted directly, bypassing the catalog"""

    def _make(**overrides) -> Penalty:
        fields = {"name": f"Penalty {uuid.uuid4().hex[:8]}", "amount": Decimal("100")}
        fields.update(overrides)
        return _persist(db, Penalty(**fields))

    return _make


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return {"X-User-Id": str(admin_user.id)}


@pytest.fixture
def manager_headers(manager_user: User) -> dict:
    return {"X-User-Id": str(manager_user.id)}
