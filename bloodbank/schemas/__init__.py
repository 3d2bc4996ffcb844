from .eligibility import EligibilityVerdict, HealthProfile, RequestEligibilityQuery, UrgencyLevel
from .inventory import (
    AppointmentRecord,
    BloodAvailability,
    BloodTypeRecord,
    CompatibilityResponse,
    DonationRecord,
    InventoryWithRequests,
    InventoryWithRequestsResponse,
    LiveInventoryResponse,
    PendingRequestAggregate,
    PendingRequestRecord,
    StockLevel,
)
