from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union
from datetime import date, datetime
import enum

class UrgencyLevel(str, enum.Enum):
    ROUTINE = "routine"
    URGENT = "urgent"
    EMERGENCY = "emergency"

class HealthProfile(BaseModel):
    """Self-reported donor health data. ``None`` means "not provided", never "failed"."""
    age: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = None  # kilograms
    last_donation_date: Optional[Union[datetime, date]] = None
    medical_conditions: Optional[List[str]] = Field(default_factory=list)
    medications: Optional[List[str]] = Field(default_factory=list)
    recent_surgery: Optional[bool] = False
    recent_tattoo: Optional[bool] = False
    recent_travel: Optional[bool] = False

    @field_validator('medical_conditions', 'medications', mode='before')
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v

    @field_validator('recent_surgery', 'recent_tattoo', 'recent_travel', mode='before')
    @classmethod
    def none_as_false(cls, v):
        return False if v is None else v

class EligibilityVerdict(BaseModel):
    is_eligible: bool
    reasons: List[str] = Field(default_factory=list)
    next_eligible_date: Optional[date] = None
    required_documents: Optional[List[str]] = None

    class Config:
        frozen = True

class RequestEligibilityQuery(BaseModel):
    urgency_level: UrgencyLevel = UrgencyLevel.ROUTINE
