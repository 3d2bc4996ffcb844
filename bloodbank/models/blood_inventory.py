from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from bloodbank.database.database import Base

class BloodInventory(Base):
    __tablename__ = "blood_inventory"

    id = Column(Integer, primary_key=True, index=True)
    blood_type = Column(String(3), unique=True, index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    capacity = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
