"""Pytest configuration and fixtures."""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RECAPTCHA_SECRET_KEY"] = ""
os.environ["ENVIRONMENT"] = "test"

from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

from carwash.auth import create_access_token, hash_password
from carwash.db import get_session
from carwash.main import app
from carwash.models import Booking, BusinessHours, Service, User


@pytest.fixture(name="session")
def session_fixture():
    """In-memory SQLite database shared by the app and the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def open_every_day(session):
    for day in range(7):
        session.add(BusinessHours(day_of_week=day, start_time=time(8, 0), end_time=time(17, 0)))
    session.commit()


@pytest.fixture
def service(session):
    db_service = Service(name="Hand Wash", price_cents=2500, duration_minutes=30, capacity=1)
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@pytest.fixture
def future_day():
    return date.today() + timedelta(days=10)


def _make_user(session, email, role):
    user = User(email=email, password_hash=hash_password("password123"), role=role)
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def admin_headers(session):
    _make_user(session, "admin@example.com", "admin")
    return {"Authorization": f"Bearer {create_access_token({'sub': 'admin@example.com'})}"}


@pytest.fixture
def staff_headers(session):
    _make_user(session, "staff@example.com", "staff")
    return {"Authorization": f"Bearer {create_access_token({'sub': 'staff@example.com'})}"}


@pytest.fixture
def make_booking(session, service):
    """Insert a booking directly, bypassing slot checks."""
    counter = {"n": 0}

    def _make(starts_at: datetime, status: str = "PENDING", **fields):
        counter["n"] += 1
        booking = Booking(
            service_id=service.id,
            vehicle_type="small_car",
            date=starts_at.date(),
            start_time=starts_at.time(),
            end_time=(starts_at + timedelta(minutes=service.duration_minutes)).time(),
            duration_minutes=service.duration_minutes,
            price_cents=service.price_cents,
            status=status,
            customer_name="Test Customer",
            customer_email="customer@example.com",
            customer_phone="+358401234567",
            confirmation_code=f"TEST{counter['n']:04d}",
            **fields,
        )
        session.add(booking)
        session.commit()
        session.refresh(booking)
        return booking

    return _make
