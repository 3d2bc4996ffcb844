from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime, time
import enum

class StockLevel(str, enum.Enum):
    CRITICAL = "critical"
    LOW = "low"
    GOOD = "good"

# Records read from the data store

class BloodTypeRecord(BaseModel):
    id: Optional[int] = None
    blood_type: str
    quantity: int = 0
    capacity: Optional[int] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PendingRequestRecord(BaseModel):
    blood_type: str
    quantity: int = 0
    status: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        from_attributes = True

class AppointmentRecord(BaseModel):
    appointment_date: date
    appointment_time: Optional[time] = None
    status: str

    class Config:
        from_attributes = True

class DonationRecord(BaseModel):
    donation_date: Optional[date] = None

    class Config:
        from_attributes = True

# Computed values

class PendingRequestAggregate(BaseModel):
    blood_type: str
    total_units: int = 0
    request_count: int = 0

class BloodAvailability(BaseModel):
    blood_type: str
    available_units: int
    capacity: int
    pending_requests: int
    is_available: bool
    stock_level: StockLevel
    stock_percentage: float

class InventoryWithRequests(BloodTypeRecord):
    pending_requests: int = 0
    request_count: int = 0
    stock_percentage: float = 0.0
    stock_level: StockLevel = StockLevel.GOOD

class InventoryWithRequestsResponse(InventoryWithRequests):
    needs_attention: bool = False

class LiveInventoryResponse(BaseModel):
    refreshed_at: Optional[datetime] = None
    items: list[InventoryWithRequests] = []

class CompatibilityResponse(BaseModel):
    blood_type: str
    can_receive_from: list[str] = []
    can_donate_to: list[str] = []
    compatible: Optional[bool] = None
