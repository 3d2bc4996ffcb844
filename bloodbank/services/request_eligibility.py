"""
Request eligibility: may this caller submit a blood request at the given urgency?
"""
import logging
from typing import Dict, List, Optional

from bloodbank.schemas.eligibility import EligibilityVerdict, UrgencyLevel
from bloodbank.services.data_store import BloodBankStore

logger = logging.getLogger(__name__)

REQUIRED_DOCUMENTS: Dict[UrgencyLevel, List[str]] = {
    UrgencyLevel.ROUTINE: [
        "Medical prescription",
        "Blood type confirmation",
        "Valid ID",
        "Insurance documentation",
    ],
    UrgencyLevel.URGENT: [
        "Medical prescription",
        "Hospital documentation",
        "Blood type confirmation",
        "Valid ID",
    ],
    UrgencyLevel.EMERGENCY: [
        "Emergency medical authorization",
        "Valid ID",
    ],
}

# Tiers that need blood on hand right away
INVENTORY_CHECKED_URGENCIES = (UrgencyLevel.URGENT, UrgencyLevel.EMERGENCY)


def evaluate_request_eligibility(
    store: BloodBankStore,
    urgency_level: UrgencyLevel,
    user_id: Optional[str],
) -> EligibilityVerdict:
    """
    Evaluate whether ``user_id`` may submit a request at ``urgency_level``.

    An anonymous caller is rejected before any store read. Otherwise the
    pending-request and inventory rules are both applied and the verdict
    always lists the documents the urgency tier requires.

    Raises:
        DataStoreUnavailable: a store read failed; no verdict is produced.
    """
    urgency_level = UrgencyLevel(urgency_level)

    if not user_id:
        return EligibilityVerdict(
            is_eligible=False,
            reasons=["Must be logged in to request blood"],
            required_documents=[],
        )

    reasons: List[str] = []

    # Emergencies may stack on top of an open request
    if urgency_level != UrgencyLevel.EMERGENCY:
        pending = store.list_pending_requests(user_id=user_id)
        if pending:
            reasons.append("You already have a pending blood request")

    # TODO: check the requested blood type and quantity once request forms send them;
    # only the existence of any inventory rows is checked today.
    if urgency_level in INVENTORY_CHECKED_URGENCIES:
        if not store.list_all_blood_type_records():
            reasons.append("No blood inventory available for urgent requests")

    logger.info(
        f"Request eligibility for user {user_id} ({urgency_level.value}): "
        f"{'eligible' if not reasons else 'ineligible'}"
    )
    return EligibilityVerdict(
        is_eligible=not reasons,
        reasons=reasons,
        required_documents=list(REQUIRED_DOCUMENTS[urgency_level]),
    )
