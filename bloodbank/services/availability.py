"""
Availability scoring: stock level per blood type, weighed against pending demand.
"""
import logging
from typing import Dict, Iterable, List, Optional

from bloodbank.models.blood_request import RequestStatus
from bloodbank.schemas.inventory import (
    BloodAvailability,
    InventoryWithRequests,
    PendingRequestAggregate,
    PendingRequestRecord,
    StockLevel,
)
from bloodbank.services.compatibility import get_compatible_donors
from bloodbank.services.data_store import BloodBankStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
CRITICAL_STOCK_PERCENT = 20
LOW_STOCK_PERCENT = 40


def effective_capacity(capacity: Optional[int]) -> int:
    """Missing or zero capacity falls back to DEFAULT_CAPACITY."""
    return capacity or DEFAULT_CAPACITY


def stock_percentage(quantity: Optional[int], capacity: Optional[int]) -> float:
    # Multiply first so exact thresholds (e.g. 20 of 100) land exactly
    return (quantity or 0) * 100 / effective_capacity(capacity)


def classify_stock_level(quantity: Optional[int], capacity: Optional[int]) -> StockLevel:
    """<20% of capacity is critical, <40% is low, anything else is good."""
    percentage = stock_percentage(quantity, capacity)
    if percentage < CRITICAL_STOCK_PERCENT:
        return StockLevel.CRITICAL
    if percentage < LOW_STOCK_PERCENT:
        return StockLevel.LOW
    return StockLevel.GOOD


def aggregate_pending_requests(
    requests: Iterable[PendingRequestRecord],
) -> Dict[str, PendingRequestAggregate]:
    """Total units and request count per blood type, over pending rows only."""
    aggregates: Dict[str, PendingRequestAggregate] = {}
    for request in requests:
        if request.status is not None and request.status != RequestStatus.PENDING.value:
            continue
        aggregate = aggregates.setdefault(
            request.blood_type, PendingRequestAggregate(blood_type=request.blood_type)
        )
        aggregate.total_units += request.quantity or 0
        aggregate.request_count += 1
    return aggregates


def check_availability(
    store: BloodBankStore,
    blood_type: str,
    required_units: int = 1,
) -> BloodAvailability:
    """
    Availability of one blood type.

    Unknown or unstocked types are reported as zero units against the
    default capacity rather than raising.

    Raises:
        DataStoreUnavailable: if either store read fails.
    """
    record = store.get_blood_type_record(blood_type)
    pending = aggregate_pending_requests(store.list_pending_requests(blood_type=blood_type))

    available_units = record.quantity if record and record.quantity else 0
    capacity = effective_capacity(record.capacity if record else None)
    aggregate = pending.get(blood_type)

    return BloodAvailability(
        blood_type=blood_type,
        available_units=available_units,
        capacity=capacity,
        pending_requests=aggregate.total_units if aggregate else 0,
        is_available=available_units >= required_units,
        stock_level=classify_stock_level(available_units, capacity),
        stock_percentage=stock_percentage(available_units, capacity),
    )


def check_compatible_blood_types(
    store: BloodBankStore,
    recipient_blood_type: str,
) -> List[BloodAvailability]:
    """Availability of every donor type the recipient may receive, in table order."""
    return [
        check_availability(store, donor_type)
        for donor_type in get_compatible_donors(recipient_blood_type)
    ]


def get_blood_inventory_with_requests(store: BloodBankStore) -> List[InventoryWithRequests]:
    """Every inventory row enriched with its pending demand."""
    inventory = store.list_all_blood_type_records()
    pending = aggregate_pending_requests(store.list_pending_requests())

    enriched = []
    for record in inventory:
        aggregate = pending.get(record.blood_type)
        enriched.append(InventoryWithRequests(
            **record.model_dump(),
            pending_requests=aggregate.total_units if aggregate else 0,
            request_count=aggregate.request_count if aggregate else 0,
            stock_percentage=stock_percentage(record.quantity, record.capacity),
            stock_level=classify_stock_level(record.quantity, record.capacity),
        ))

    logger.debug(f"Enriched {len(enriched)} inventory rows with {len(pending)} pending blood type(s)")
    return enriched
