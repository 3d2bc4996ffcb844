from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from bloodbank.database.database import Base
import enum

class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FULFILLED = "fulfilled"

class BloodRequest(Base):
    __tablename__ = "blood_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True, index=True)
    blood_type = Column(String(3), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    status = Column(String, nullable=True, default=RequestStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
