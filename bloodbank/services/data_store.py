"""
Read access to the blood bank tables.

The evaluators only talk to a ``BloodBankStore``; ``SQLAlchemyBloodBankStore``
is the database-backed implementation. Any database failure is re-raised as
``DataStoreUnavailable`` and is never retried here.
"""
import logging
from contextlib import contextmanager
from functools import wraps
from typing import Iterator, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bloodbank.core.exceptions import DataStoreUnavailable
from bloodbank.database.database import SessionLocal
from bloodbank.models.appointment import Appointment
from bloodbank.models.blood_inventory import BloodInventory
from bloodbank.models.blood_request import BloodRequest, RequestStatus
from bloodbank.models.donation import Donation
from bloodbank.schemas.inventory import (
    AppointmentRecord,
    BloodTypeRecord,
    DonationRecord,
    PendingRequestRecord,
)

logger = logging.getLogger(__name__)


class BloodBankStore(Protocol):
    def get_blood_type_record(self, blood_type: str) -> Optional[BloodTypeRecord]: ...

    def list_pending_requests(
        self, blood_type: Optional[str] = None, user_id: Optional[str] = None
    ) -> List[PendingRequestRecord]: ...

    def list_appointments(self, donor_id: str, status: str) -> List[AppointmentRecord]: ...

    def get_most_recent_donation(self, donor_id: str) -> Optional[DonationRecord]: ...

    def list_all_blood_type_records(self) -> List[BloodTypeRecord]: ...


def _store_read(operation: str):
    """Translate SQLAlchemy errors raised by a read into DataStoreUnavailable."""
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Store read '{operation}' failed: {e}")
                raise DataStoreUnavailable(operation, str(e)) from e
        return wrapper
    return decorator


class SQLAlchemyBloodBankStore:
    """BloodBankStore over an open SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @_store_read("get_blood_type_record")
    def get_blood_type_record(self, blood_type: str) -> Optional[BloodTypeRecord]:
        row = self.db.query(BloodInventory).filter(BloodInventory.blood_type == blood_type).first()
        return BloodTypeRecord.model_validate(row) if row else None

    @_store_read("list_pending_requests")
    def list_pending_requests(
        self, blood_type: Optional[str] = None, user_id: Optional[str] = None
    ) -> List[PendingRequestRecord]:
        query = self.db.query(BloodRequest).filter(BloodRequest.status == RequestStatus.PENDING.value)
        if blood_type is not None:
            query = query.filter(BloodRequest.blood_type == blood_type)
        if user_id is not None:
            query = query.filter(BloodRequest.user_id == user_id)
        return [PendingRequestRecord.model_validate(row) for row in query.order_by(BloodRequest.id).all()]

    @_store_read("list_appointments")
    def list_appointments(self, donor_id: str, status: str) -> List[AppointmentRecord]:
        rows = (
            self.db.query(Appointment)
            .filter(Appointment.donor_id == donor_id, Appointment.status == status)
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .all()
        )
        return [AppointmentRecord.model_validate(row) for row in rows]

    @_store_read("get_most_recent_donation")
    def get_most_recent_donation(self, donor_id: str) -> Optional[DonationRecord]:
        row = (
            self.db.query(Donation)
            .filter(Donation.donor_id == donor_id, Donation.donation_date.is_not(None))
            .order_by(Donation.donation_date.desc())
            .first()
        )
        return DonationRecord.model_validate(row) if row else None

    @_store_read("list_all_blood_type_records")
    def list_all_blood_type_records(self) -> List[BloodTypeRecord]:
        rows = self.db.query(BloodInventory).order_by(BloodInventory.blood_type).all()
        return [BloodTypeRecord.model_validate(row) for row in rows]


@contextmanager
def session_store(session_factory=None) -> Iterator[SQLAlchemyBloodBankStore]:
    """Store over a short-lived session, for work outside a request."""
    db = (session_factory or SessionLocal)()
    try:
        yield SQLAlchemyBloodBankStore(db)
    finally:
        db.close()
