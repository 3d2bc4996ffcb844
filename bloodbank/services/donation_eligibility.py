"""
Donation eligibility engine: screen a prospective donor's health profile.

Every rule is evaluated, so the verdict lists all reasons at once.
Missing profile fields are neutral; only supplied values can disqualify.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from bloodbank.schemas.eligibility import EligibilityVerdict, HealthProfile

logger = logging.getLogger(__name__)

AGE_MIN = 18
AGE_MAX = 65
WEIGHT_MIN_KG = 50
MIN_DONATION_INTERVAL_DAYS = 56

EXCLUDING_CONDITIONS = ("HIV", "Hepatitis B", "Hepatitis C", "Syphilis", "Cancer", "Heart Disease")
EXCLUDING_MEDICATIONS = ("Aspirin", "Warfarin", "Antibiotics", "Isotretinoin")


def days_since(last: Union[date, datetime], today: Optional[date] = None) -> int:
    """Whole days elapsed between ``last`` and ``today`` (floored)."""
    today = today or date.today()
    if isinstance(last, datetime):
        last = last.date()
    return (today - last).days


def remaining_wait_days(last: Union[date, datetime], today: Optional[date] = None) -> int:
    """Days still to wait before the next donation; 0 once the interval has passed."""
    return max(MIN_DONATION_INTERVAL_DAYS - days_since(last, today), 0)


def wait_reason(days_remaining: int) -> str:
    return f"Must wait {days_remaining} more days since last donation"


def matches_exclusion(value: str, exclusions: Iterable[str]) -> bool:
    """Case-insensitive substring match, so variant phrasings are caught too."""
    lowered = value.lower()
    return any(exclusion.lower() in lowered for exclusion in exclusions)


def evaluate_donation_eligibility(
    profile: HealthProfile,
    today: Optional[date] = None,
) -> EligibilityVerdict:
    today = today or date.today()
    reasons: List[str] = []
    next_eligible_date: Optional[date] = None

    # Age: 18-65 inclusive
    if profile.age is not None:
        if profile.age < AGE_MIN:
            reasons.append(f"Must be at least {AGE_MIN} years old to donate")
        elif profile.age > AGE_MAX:
            reasons.append(f"Must be {AGE_MAX} years old or younger to donate")

    if profile.weight is not None and profile.weight < WEIGHT_MIN_KG:
        reasons.append(f"Must weigh at least {WEIGHT_MIN_KG}kg to donate")

    # Whole-blood donation interval
    if profile.last_donation_date is not None:
        days_remaining = remaining_wait_days(profile.last_donation_date, today)
        if days_remaining > 0:
            reasons.append(wait_reason(days_remaining))
            next_eligible_date = today + timedelta(days=days_remaining)

    # The flags are authoritative; the waiting periods are policy text only
    if profile.recent_surgery:
        reasons.append("Cannot donate within 4 weeks of surgery")
    if profile.recent_tattoo:
        reasons.append("Cannot donate within 4 months of getting a tattoo or piercing")
    if profile.recent_travel:
        reasons.append("Cannot donate within 3 months of travel to a malaria-endemic area")

    for condition in profile.medical_conditions:
        if matches_exclusion(condition, EXCLUDING_CONDITIONS):
            reasons.append(f"Cannot donate due to medical condition: {condition}")

    for medication in profile.medications:
        if matches_exclusion(medication, EXCLUDING_MEDICATIONS):
            reasons.append(f"Cannot donate while taking: {medication}")

    if reasons:
        logger.debug(f"Donation eligibility failed {len(reasons)} rule(s)")

    return EligibilityVerdict(
        is_eligible=not reasons,
        reasons=reasons,
        next_eligible_date=next_eligible_date,
    )
