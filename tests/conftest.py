"""
Shared fixtures for the rent payments test suite.

The app reads DATABASE_URL and JWT_SECRET at import time, so both are set
here before anything from the project is imported. Every test gets a
fresh in-memory SQLite schema.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import SessionLocal, engine, get_session, init_db
from dependencies import RequestContext, create_access_token
from models import Base, House, HouseAvailability, Rental, RentalPaymentStatus, RentalStatus, User, UserRole
from services.notification_hub import NotificationHub, get_notification_hub


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin(db):
    user = User(name="Admin User", email="admin@example.com", role=UserRole.ADMIN)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def tenant(db):
    user = User(name="Jane Wanjiku", email="jane@example.com", role=UserRole.TENANT)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def other_tenant(db):
    user = User(name="Peter Otieno", email="peter@example.com", role=UserRole.TENANT)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def house(db):
    house = House(house_no="A12", price=Decimal("15000.00"), availability=HouseAvailability.RENTED)
    db.add(house)
    db.commit()
    return house


@pytest.fixture
def rental(db, tenant, house):
    rental = Rental(
        tenant_id=tenant.id,
        house_id=house.id,
        start_date=date(2025, 10, 1),
        amount=Decimal("15000.00"),
        next_payment_date=date(2025, 11, 5),
        payment_status=RentalPaymentStatus.PENDING,
        rental_status=RentalStatus.ACTIVE,
    )
    db.add(rental)
    db.commit()
    return rental


# ---------------------------------------------------------------------------
# Auth fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tenant_ctx(tenant):
    return RequestContext(user_id=tenant.id, role=UserRole.TENANT)


@pytest.fixture
def admin_ctx(admin):
    return RequestContext(user_id=admin.id, role=UserRole.ADMIN)


@pytest.fixture
def tenant_token(tenant):
    return create_access_token(tenant.id, "tenant")


@pytest.fixture
def admin_token(admin):
    return create_access_token(admin.id, "admin")


@pytest.fixture
def tenant_headers(tenant_token):
    return {"Authorization": f"Bearer {tenant_token}"}


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def hub():
    return NotificationHub(send_timeout=1)


@pytest.fixture
def client(db, hub):
    """TestClient sharing the test session and a private notification hub."""
    from main import app

    def override_session():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_notification_hub] = lambda: hub
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
