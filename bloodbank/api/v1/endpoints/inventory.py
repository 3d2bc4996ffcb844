from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime, timezone
import logging

from bloodbank.api.deps import get_store
from bloodbank.schemas.inventory import (
    BloodAvailability,
    CompatibilityResponse,
    InventoryWithRequests,
    InventoryWithRequestsResponse,
    LiveInventoryResponse,
    StockLevel,
)
from bloodbank.services.availability import (
    check_availability,
    check_compatible_blood_types,
    get_blood_inventory_with_requests,
)
from bloodbank.services.compatibility import (
    get_compatible_donors,
    get_compatible_recipients,
    is_compatible,
)
from bloodbank.services.data_store import BloodBankStore

logger = logging.getLogger(__name__)
router = APIRouter()

# Triage thresholds used by the "process requests" screen
ATTENTION_REQUEST_COUNT = 2


def needs_attention(item: InventoryWithRequests) -> bool:
    return item.request_count > ATTENTION_REQUEST_COUNT or item.stock_level == StockLevel.CRITICAL


@router.get("/compatibility", response_model=CompatibilityResponse, response_model_exclude_none=True)
def get_compatibility(
    blood_type: str = Query(..., min_length=1, description="ABO/Rh type, e.g. O+"),
    donor_blood_type: Optional[str] = Query(None, min_length=1),
):
    """Donor and recipient types for a blood type; optionally checks one donor against it."""
    return CompatibilityResponse(
        blood_type=blood_type,
        can_receive_from=get_compatible_donors(blood_type),
        can_donate_to=get_compatible_recipients(blood_type),
        compatible=is_compatible(donor_blood_type, blood_type) if donor_blood_type else None,
    )


@router.get("/availability", response_model=BloodAvailability)
def get_availability(
    blood_type: str = Query(..., min_length=1, description="ABO/Rh type, e.g. O+"),
    required_units: int = Query(1, ge=0),
    store: BloodBankStore = Depends(get_store),
):
    """Stock of a single blood type against the units required."""
    return check_availability(store, blood_type, required_units)


@router.get("/compatible", response_model=List[BloodAvailability])
def get_compatible_availability(
    recipient_blood_type: str = Query(..., min_length=1),
    store: BloodBankStore = Depends(get_store),
):
    """Stock of every donor type compatible with the recipient."""
    return check_compatible_blood_types(store, recipient_blood_type)


@router.get("/with-requests", response_model=List[InventoryWithRequestsResponse])
def get_inventory_with_requests(store: BloodBankStore = Depends(get_store)):
    """All inventory rows with pending demand, flagged for triage."""
    return [
        InventoryWithRequestsResponse(**item.model_dump(), needs_attention=needs_attention(item))
        for item in get_blood_inventory_with_requests(store)
    ]


@router.get("/live", response_model=LiveInventoryResponse)
def get_live_inventory(store: BloodBankStore = Depends(get_store)):
    """Inventory view read from the database on every call, stamped with the read time."""
    refreshed_at = datetime.now(timezone.utc)
    return LiveInventoryResponse(
        refreshed_at=refreshed_at,
        items=get_blood_inventory_with_requests(store),
    )
