"""
Donor <-> request matching.

find_donors ranks the donor pool for one open request; find_requests ranks
the open requests a single donor can fulfill. Both work on point-in-time
snapshots handed in by the caller and never touch the database, so results
are advisory: nothing is reserved.
"""
import logging
import math
from datetime import date, datetime

from algorithms.blood_compatibility import (
    compatible_donors_for,
    compatible_recipients_for,
    sorted_types,
)
from algorithms.exceptions import NotADonor, RequestNotOpen
from algorithms.haversine import distances_from
from algorithms.priority import urgency_rank

DEFAULT_MAX_DISTANCE_KM = 50
DEFAULT_LIMIT = 20
DONOR_ROLES = ('donor', 'both')

logger = logging.getLogger(__name__)


def is_donor_role(role):
    return role in DONOR_ROLES


def _distance_sort_key(distance):
    # None sorts after every measured distance
    return (distance is None, distance if distance is not None else 0.0)


def _attach_distances(origin, items, require_location, max_distance_km):
    """
    Pair each item with its distance from origin and drop those too far away.

    Items without a location are dropped when require_location is set,
    otherwise kept with a None distance.
    """
    if require_location:
        items = [item for item in items if item.location.is_known]

    distances = distances_from(origin, [item.location for item in items])
    paired = []
    for item, km in zip(items, distances):
        if math.isnan(km):
            paired.append((item, None))
        elif km <= max_distance_km:
            paired.append((item, float(km)))
    return paired


def _round_km(distance):
    return round(distance, 1) if distance is not None else None


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def find_donors(blood_request, pool, max_distance_km=DEFAULT_MAX_DISTANCE_KM, limit=DEFAULT_LIMIT):
    """
    Match and rank donors for an open blood request.

    Steps:
    1. Resolve the donor blood types compatible with the request
    2. Keep available donors with a donor role and a compatible type
    3. When the request has a location, keep donors within max_distance_km
    4. Rank by distance, or by longest time since last donation when the
       request has no location
    5. Truncate to limit; None keeps every match

    Args:
        blood_request: object with status, blood_type and location
        pool: iterable of donor profiles (role, blood_type, is_available,
            location, last_donation_date)

    Returns:
        dict with compatible_blood_types, total_matches (before the limit)
        and donors, a list of {'donor', 'distance_km'} dicts
    """
    if blood_request.status != 'open':
        raise RequestNotOpen(f"Blood request is {blood_request.status}, not open")

    compatible_types = compatible_donors_for(blood_request.blood_type)

    candidates = [
        donor for donor in pool
        if is_donor_role(donor.role)
        and donor.blood_type in compatible_types
        and donor.is_available
    ]

    # Never-donated first, then longest since last donation
    candidates.sort(key=lambda d: (d.last_donation_date is not None, _as_date(d.last_donation_date) or date.min))

    if blood_request.location.is_known:
        ranked = _attach_distances(blood_request.location, candidates, True, max_distance_km)
        ranked.sort(key=lambda pair: _distance_sort_key(pair[1]))
    else:
        ranked = [(donor, None) for donor in candidates]

    logger.info(
        "%d donors matched for blood request %s (%s)",
        len(ranked), getattr(blood_request, 'pk', None), blood_request.blood_type,
    )

    return {
        'compatible_blood_types': sorted_types(compatible_types),
        'total_matches': len(ranked),
        'donors': [
            {'donor': donor, 'distance_km': _round_km(distance)}
            for donor, distance in ranked[:limit]
        ],
    }


def find_requests(donor, pool, max_distance_km=DEFAULT_MAX_DISTANCE_KM, urgency=None,
                  limit=DEFAULT_LIMIT, today=None):
    """
    Find open blood requests a donor can fulfill, most urgent and nearest first.

    Requests without a location are kept with a None distance and rank after
    located requests of the same urgency.

    Returns:
        dict with donor_blood_type, can_donate_to, total_matches (before the
        limit) and requests, a list of {'request', 'distance_km'} dicts
    """
    if not is_donor_role(donor.role):
        raise NotADonor()

    can_donate_to = compatible_recipients_for(donor.blood_type)
    today = today or date.today()

    candidates = [
        req for req in pool
        if req.status == 'open'
        and req.blood_type in can_donate_to
        and req.needed_by is not None and _as_date(req.needed_by) >= today
        and (urgency is None or req.urgency == urgency)
    ]

    # Earliest deadline breaks ties inside the same urgency and distance
    candidates.sort(key=lambda r: _as_date(r.needed_by))

    if donor.location.is_known:
        ranked = _attach_distances(donor.location, candidates, False, max_distance_km)
    else:
        ranked = [(req, None) for req in candidates]
    ranked.sort(key=lambda pair: (urgency_rank(pair[0].urgency), _distance_sort_key(pair[1])))

    logger.info(
        "%d open requests matched for donor %s (%s)",
        len(ranked), getattr(donor, 'pk', None), donor.blood_type,
    )

    return {
        'donor_blood_type': donor.blood_type,
        'can_donate_to': sorted_types(can_donate_to),
        'total_matches': len(ranked),
        'requests': [
            {'request': req, 'distance_km': _round_km(distance)}
            for req, distance in ranked[:limit]
        ],
    }
