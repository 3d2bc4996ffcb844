from fastapi import APIRouter, Depends
from typing import Optional
import logging

from bloodbank.api.deps import get_current_user_id, get_store
from bloodbank.schemas.eligibility import EligibilityVerdict, HealthProfile, RequestEligibilityQuery
from bloodbank.services.appointment_eligibility import evaluate_appointment_eligibility
from bloodbank.services.data_store import BloodBankStore
from bloodbank.services.donation_eligibility import evaluate_donation_eligibility
from bloodbank.services.request_eligibility import evaluate_request_eligibility

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/donation", response_model=EligibilityVerdict, response_model_exclude_none=True)
async def check_donation_eligibility(profile: HealthProfile):
    """Screen a prospective donor's health profile."""
    return evaluate_donation_eligibility(profile)

@router.post("/request", response_model=EligibilityVerdict)
def check_request_eligibility(
    query: RequestEligibilityQuery,
    store: BloodBankStore = Depends(get_store),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Check whether the caller may submit a blood request at the given urgency."""
    return evaluate_request_eligibility(store, query.urgency_level, user_id)

@router.get("/appointment", response_model=EligibilityVerdict, response_model_exclude_none=True)
def check_appointment_eligibility(
    store: BloodBankStore = Depends(get_store),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Check whether the caller may book a donation appointment."""
    return evaluate_appointment_eligibility(store, user_id)
