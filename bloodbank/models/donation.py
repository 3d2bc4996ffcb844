from sqlalchemy import Column, Integer, String, Date
from bloodbank.database.database import Base

class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    donor_id = Column(String, nullable=True, index=True)
    blood_type = Column(String(3), nullable=True)
    units = Column(Integer, nullable=True)
    donation_date = Column(Date, nullable=True)
