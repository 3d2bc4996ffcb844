"""Pytest configuration and fixtures."""
import os

# Keep test runs off the local database file and log directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("INVENTORY_FEED_ENABLED", "false")

from typing import List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bloodbank.core.exceptions import DataStoreUnavailable
from bloodbank.database.database import Base
from bloodbank.schemas.inventory import (
    AppointmentRecord,
    BloodTypeRecord,
    DonationRecord,
    PendingRequestRecord,
)


class FakeStore:
    """In-memory BloodBankStore."""

    def __init__(self, inventory=None, requests=None, appointments=None, donations=None):
        self.inventory: List[BloodTypeRecord] = list(inventory or [])
        self.requests: List[PendingRequestRecord] = list(requests or [])
        # donor_id -> list of AppointmentRecord
        self.appointments = dict(appointments or {})
        # donor_id -> list of DonationRecord
        self.donations = dict(donations or {})
        self.calls: List[str] = []

    def get_blood_type_record(self, blood_type: str) -> Optional[BloodTypeRecord]:
        self.calls.append("get_blood_type_record")
        return next((r for r in self.inventory if r.blood_type == blood_type), None)

    def list_pending_requests(self, blood_type=None, user_id=None) -> List[PendingRequestRecord]:
        self.calls.append("list_pending_requests")
        return [
            r for r in self.requests
            if r.status == "pending"
            and (blood_type is None or r.blood_type == blood_type)
            and (user_id is None or r.user_id == user_id)
        ]

    def list_appointments(self, donor_id: str, status: str) -> List[AppointmentRecord]:
        self.calls.append("list_appointments")
        return [a for a in self.appointments.get(donor_id, []) if a.status == status]

    def get_most_recent_donation(self, donor_id: str) -> Optional[DonationRecord]:
        self.calls.append("get_most_recent_donation")
        dated = [d for d in self.donations.get(donor_id, []) if d.donation_date is not None]
        return max(dated, key=lambda d: d.donation_date, default=None)

    def list_all_blood_type_records(self) -> List[BloodTypeRecord]:
        self.calls.append("list_all_blood_type_records")
        return sorted(self.inventory, key=lambda r: r.blood_type)


class FailingStore:
    """Store whose every read fails, as when the database is unreachable."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise DataStoreUnavailable(name, "connection refused")
        return fail


def inventory_row(blood_type, quantity, capacity=100):
    return BloodTypeRecord(blood_type=blood_type, quantity=quantity, capacity=capacity)


def pending_request(blood_type, quantity, user_id="user-1", status="pending"):
    return PendingRequestRecord(blood_type=blood_type, quantity=quantity, user_id=user_id, status=status)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    from bloodbank import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
