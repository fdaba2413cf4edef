"""Pytest fixtures: in-memory SQLite store, a seeded one-day catalog and an API client."""

import os

# Must be set before the app (and its settings) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_SECRET_KEY"] = "test-admin-secret"

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from ticketing.api.deps import get_notifier, get_payment_gateway
from ticketing.core.security import create_access_token
from ticketing.db.base import Base
from ticketing.db.session import SessionLocal, engine
from ticketing.main import app
from ticketing.models import SKU, Coupon, Event, EventDate, InventoryRecord, TimeSlot
from ticketing.models.coupon import DiscountType
from ticketing.utils.payments import DummyPaymentGateway


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today() -> date:
    return datetime.now(timezone.utc).date()


@pytest.fixture
def catalog(db, today):
    """One event, one date a week out, one 10:00-12:00 slot, two ticket types."""
    event = Event(title="Rangotsav 2026", venue="Riverside Grounds")
    db.add(event)
    db.flush()

    event_date = EventDate(event_id=event.id, date=today + timedelta(days=7), is_available=True)
    db.add(event_date)
    db.flush()

    slot = TimeSlot(event_date_id=event_date.id, start_time=time(10, 0), end_time=time(12, 0), capacity=100)
    individual = SKU(event_id=event.id, name="Individual", base_price=Decimal("1200.00"), category="individual")
    group = SKU(event_id=event.id, name="Group of 4", base_price=Decimal("4400.00"), category="group_4")
    db.add_all([slot, individual, group])
    db.flush()

    db.add_all([
        InventoryRecord(time_slot_id=slot.id, sku_id=individual.id, total_quantity=10, available_quantity=10),
        InventoryRecord(time_slot_id=slot.id, sku_id=group.id, total_quantity=5, available_quantity=5),
    ])
    db.commit()

    return SimpleNamespace(
        event_id=event.id,
        date_id=event_date.id,
        slot_id=slot.id,
        individual_id=individual.id,
        group_id=group.id,
    )


@pytest.fixture
def make_coupon(db):
    def _make(code="SAVE10", discount_type=DiscountType.percentage, discount_value="10", **kwargs):
        coupon = Coupon(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            **kwargs,
        )
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    return _make


@pytest.fixture
def gateway():
    return DummyPaymentGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(gateway, notifier):
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('tests', role='admin')}"}


@pytest.fixture
def scanner_headers():
    return {"Authorization": f"Bearer {create_access_token('tests', role='scanner')}"}


@pytest.fixture
def visitor_data() -> dict:
    return {
        "first_name": "Asha",
        "last_name": "Verma",
        "email": "asha@example.com",
        "phone": "98765 43210",
    }
