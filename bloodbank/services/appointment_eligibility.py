"""Appointment eligibility: may this donor book another donation slot?"""
import logging
from datetime import date
from typing import List, Optional

from bloodbank.models.appointment import AppointmentStatus
from bloodbank.schemas.eligibility import EligibilityVerdict
from bloodbank.services.data_store import BloodBankStore
from bloodbank.services.donation_eligibility import remaining_wait_days, wait_reason

logger = logging.getLogger(__name__)


def evaluate_appointment_eligibility(
    store: BloodBankStore,
    user_id: Optional[str],
    today: Optional[date] = None,
) -> EligibilityVerdict:
    if not user_id:
        return EligibilityVerdict(
            is_eligible=False,
            reasons=["Must be logged in to schedule appointments"],
        )

    reasons: List[str] = []

    scheduled = store.list_appointments(donor_id=user_id, status=AppointmentStatus.SCHEDULED.value)
    if scheduled:
        reasons.append("You already have a scheduled appointment")

    # The day count lives in the reason text only; next_eligible_date stays unset here
    last_donation = store.get_most_recent_donation(user_id)
    if last_donation is not None and last_donation.donation_date is not None:
        days_remaining = remaining_wait_days(last_donation.donation_date, today)
        if days_remaining > 0:
            reasons.append(wait_reason(days_remaining))

    logger.info(f"Appointment eligibility for donor {user_id}: {len(reasons)} blocking reason(s)")
    return EligibilityVerdict(is_eligible=not reasons, reasons=reasons)
