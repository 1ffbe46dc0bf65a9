"""
Donation eligibility rules.

A donor may give whole blood when all four checks pass:
- at least 56 days since the last donation
- at least 18 years old
- at least 50 kg
- no reported health conditions

Every check is always evaluated so the donor sees every failing rule at once.
Missing optional data (no last donation, no date of birth, no weight) never
disqualifies.
"""
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

DONATION_INTERVAL_DAYS = 56
MIN_AGE = 18
MIN_WEIGHT_KG = 50
DAYS_PER_YEAR = 365.25

DISQUALIFYING_CONDITIONS = [
    'HIV/AIDS',
    'Hepatitis B or C',
    'Heart disease',
    'Cancer (active)',
    'Severe anemia',
    'Tuberculosis (active)',
    'Malaria (recent)',
    'Recent surgery (within 6 months)',
    'Pregnancy',
    'Recent tattoo or piercing (within 6 months)',
]


@dataclass
class DateEligibility:
    eligible: bool
    days_since_last_donation: Optional[int]
    days_until_eligible: int
    next_eligible_date: Optional[date]
    last_donation_date: Optional[date]


@dataclass
class AgeEligibility:
    eligible: bool
    age: Optional[int]
    minimum_age: int = MIN_AGE


@dataclass
class WeightEligibility:
    eligible: bool
    weight_kg: Optional[float]
    minimum_weight: int = MIN_WEIGHT_KG


@dataclass
class HealthStatus:
    eligible: bool
    has_conditions: bool
    conditions: List[str] = field(default_factory=list)


@dataclass
class EligibilityStatus:
    eligible: bool
    reasons: List[str]
    date_eligibility: DateEligibility
    age_eligibility: AgeEligibility
    weight_eligibility: WeightEligibility
    health_status: HealthStatus

    def to_dict(self):
        return asdict(self)


def _as_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def days_since_last_donation(last_donation_date, now=None):
    """Whole days since the last donation; infinite for a first-time donor"""
    last_donation_date = _as_date(last_donation_date)
    if last_donation_date is None:
        return math.inf
    today = _as_date(now) or date.today()
    return (today - last_donation_date).days


def is_eligible_by_date(last_donation_date, now=None):
    return days_since_last_donation(last_donation_date, now) >= DONATION_INTERVAL_DAYS


def days_until_eligible(last_donation_date, now=None):
    """Days remaining until the donation interval has passed (0 if already eligible)"""
    if last_donation_date is None:
        return 0
    remaining = DONATION_INTERVAL_DAYS - days_since_last_donation(last_donation_date, now)
    return max(0, remaining)


def next_eligible_date(last_donation_date, now=None):
    """Date the donor becomes eligible again, or None when already eligible"""
    if is_eligible_by_date(last_donation_date, now):
        return None
    return _as_date(last_donation_date) + timedelta(days=DONATION_INTERVAL_DAYS)


def age_on(date_of_birth, now=None):
    date_of_birth = _as_date(date_of_birth)
    if date_of_birth is None:
        return None
    today = _as_date(now) or date.today()
    return math.floor((today - date_of_birth).days / DAYS_PER_YEAR)


def check_date(last_donation_date, now=None) -> DateEligibility:
    last_donation_date = _as_date(last_donation_date)
    since = days_since_last_donation(last_donation_date, now)
    return DateEligibility(
        eligible=since >= DONATION_INTERVAL_DAYS,
        days_since_last_donation=None if since == math.inf else since,
        days_until_eligible=days_until_eligible(last_donation_date, now),
        next_eligible_date=next_eligible_date(last_donation_date, now),
        last_donation_date=last_donation_date,
    )


def check_age(date_of_birth, now=None) -> AgeEligibility:
    age = age_on(date_of_birth, now)
    return AgeEligibility(eligible=age is None or age >= MIN_AGE, age=age)


def check_weight(weight_kg) -> WeightEligibility:
    return WeightEligibility(
        eligible=weight_kg is None or weight_kg >= MIN_WEIGHT_KG,
        weight_kg=weight_kg,
    )


def check_health(conditions) -> HealthStatus:
    conditions = clean_conditions(conditions)
    # Any reported condition blocks until reviewed; see classify_conditions for named screening
    return HealthStatus(
        eligible=not conditions,
        has_conditions=bool(conditions),
        conditions=conditions,
    )


def evaluate(profile, now=None) -> EligibilityStatus:
    """
    Get comprehensive eligibility status for a donor profile.

    Args:
        profile: object with last_donation_date, date_of_birth, weight_kg
            and health_conditions attributes (each may be None)
        now: date to evaluate against, defaults to today

    Returns:
        EligibilityStatus
    """
    date_status = check_date(getattr(profile, 'last_donation_date', None), now)
    age_status = check_age(getattr(profile, 'date_of_birth', None), now)
    weight_status = check_weight(getattr(profile, 'weight_kg', None))
    health_status = check_health(getattr(profile, 'health_conditions', None))

    reasons = []
    if not date_status.eligible:
        reasons.append(
            f"Must wait {date_status.days_until_eligible} more days "
            f"({DONATION_INTERVAL_DAYS}-day minimum interval)"
        )
    if not age_status.eligible:
        reasons.append(f"Must be at least {MIN_AGE} years old")
    if not weight_status.eligible:
        reasons.append(f"Must weigh at least {MIN_WEIGHT_KG} kg")
    if not health_status.eligible:
        reasons.append('Health conditions may affect eligibility')

    return EligibilityStatus(
        eligible=not reasons,
        reasons=reasons,
        date_eligibility=date_status,
        age_eligibility=age_status,
        weight_eligibility=weight_status,
        health_status=health_status,
    )


def clean_conditions(conditions):
    if not conditions:
        return []
    if isinstance(conditions, str):
        conditions = conditions.split(',')
    return [c.strip() for c in conditions if c and c.strip()]


def classify_conditions(conditions):
    """
    Screen reported conditions against the named disqualifying list.

    Matching is case-insensitive and works both ways: "HIV" matches
    "HIV/AIDS", and so does "hiv/aids (early stage)".

    Returns:
        dict with valid, disqualifying and requires_review keys
    """
    conditions = clean_conditions(conditions)
    disqualifying = []
    for condition in conditions:
        reported = condition.lower()
        for listed in DISQUALIFYING_CONDITIONS:
            listed = listed.lower()
            if listed in reported or reported in listed:
                disqualifying.append(condition)
                break

    return {
        'valid': not disqualifying,
        'disqualifying': disqualifying,
        'requires_review': bool(conditions) and not disqualifying,
    }


def format_eligibility_message(status: EligibilityStatus):
    if status.eligible:
        return 'You are eligible to donate blood!'

    lines = ['You are currently not eligible to donate:']
    lines.extend(f"  - {reason}" for reason in status.reasons)
    if status.date_eligibility.next_eligible_date:
        lines.append(f"You will be eligible on: {status.date_eligibility.next_eligible_date.isoformat()}")
    return '\n'.join(lines)
