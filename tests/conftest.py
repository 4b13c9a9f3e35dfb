"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time, so they must be in place before muniportal loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from muniportal.auth import get_current_profile  # noqa: E402
from muniportal.database import Base, get_db  # noqa: E402
from muniportal.domain.workflow.registry import get_descriptor  # noqa: E402
from muniportal.domain.workflow.statuses import (  # noqa: E402
    BUSINESS_LICENSE,
    PERMIT,
    SERVICE_APPLICATION,
    TAX_SUBMISSION,
)
from muniportal.main import app  # noqa: E402
from muniportal.models import Customer, Profile, ServiceTile  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Columns each application table requires beyond the shared ones
REQUIRED_FIELDS = {
    PERMIT: {
        "permit_type": "Building",
        "property_address": "100 Main St",
        "scope_of_work": "Replace deck",
    },
    BUSINESS_LICENSE: {"business_legal_name": "Corner Bakery LLC"},
    TAX_SUBMISSION: {
        "tax_type": "food_beverage",
        "tax_period_start": date(2024, 1, 1),
        "tax_period_end": date(2024, 1, 31),
        "tax_year": 2024,
    },
    SERVICE_APPLICATION: {},
}


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def make_customer(db):
    def _make(name="Village of Oakridge"):
        customer = Customer(legal_entity_name=name, entity_type="village")
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return _make


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def make_profile(db, customer):
    counter = {"n": 0}

    def _make(account_type="resident", customer_id=None, first_name="Pat", last_name=None):
        counter["n"] += 1
        profile = Profile(
            email=f"{account_type.lower()}{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name or f"User{counter['n']}",
            account_type=account_type,
            customer_id=customer_id,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def resident(make_profile):
    return make_profile("resident")


@pytest.fixture
def staff(make_profile, customer):
    return make_profile("municipaladmin", customer_id=customer.customer_id)


@pytest.fixture
def make_tile(db, customer):
    def _make(has_time_slots=False, booking_mode=None, time_slot_config=None, **overrides):
        tile = ServiceTile(
            customer_id=customer.customer_id,
            title=overrides.pop("title", "Pavilion Rental"),
            amount_cents=overrides.pop("amount_cents", 5000),
            has_time_slots=has_time_slots,
            booking_mode=booking_mode,
            time_slot_config=time_slot_config,
            **overrides,
        )
        db.add(tile)
        db.commit()
        db.refresh(tile)
        return tile

    return _make


@pytest.fixture
def make_application(db, customer, resident, make_tile):
    """Insert an application of any type straight into the database."""

    def _make(application_type=PERMIT, status="draft", user=None, **overrides):
        descriptor = get_descriptor(application_type)
        values = {
            "user_id": (user or resident).id,
            "customer_id": customer.customer_id,
            descriptor.status_column: status,
            **REQUIRED_FIELDS[application_type],
        }
        if application_type == SERVICE_APPLICATION and "tile_id" not in overrides:
            values["tile_id"] = make_tile().id
        values.update(overrides)

        record = descriptor.model(**values)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    return _make


@pytest.fixture
def client(db):
    """FastAPI test client sharing the test database session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def login():
    """Authenticate subsequent requests as ``profile``."""

    def _login(profile):
        app.dependency_overrides[get_current_profile] = lambda: profile

    return _login
