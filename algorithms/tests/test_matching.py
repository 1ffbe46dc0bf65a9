from datetime import date, timedelta
from types import SimpleNamespace

from django.test import SimpleTestCase

from algorithms.exceptions import InvalidBloodType, NotADonor, RequestNotOpen
from algorithms.haversine import GeoPoint
from algorithms.matching import find_donors, find_requests

TODAY = date(2024, 6, 1)
KATHMANDU = GeoPoint(27.7172, 85.3240)
UNKNOWN = GeoPoint()

# Roughly 1 km of latitude
KM = 1 / 111.2


def north_of(origin, km):
    return GeoPoint(origin.latitude + km * KM, origin.longitude)


def donor(pk, blood_type, location=KATHMANDU, role='donor', available=True, last_donation_date=None):
    return SimpleNamespace(
        pk=pk,
        role=role,
        blood_type=blood_type,
        is_available=available,
        location=location,
        last_donation_date=last_donation_date,
    )


def blood_request(pk, blood_type, location=KATHMANDU, status='open', urgency='medium',
                  needed_by=TODAY + timedelta(days=7)):
    return SimpleNamespace(
        pk=pk,
        blood_type=blood_type,
        status=status,
        urgency=urgency,
        location=location,
        needed_by=needed_by,
    )


def ids(matches, key):
    return [m[key].pk for m in matches]


class FindDonorsTests(SimpleTestCase):

    def test_only_compatible_donor_is_returned(self):
        request = blood_request(1, 'A+')
        pool = [
            donor(10, 'O-', north_of(KATHMANDU, 3)),
            donor(11, 'B+', north_of(KATHMANDU, 1)),
        ]
        result = find_donors(request, pool)

        self.assertEqual(ids(result['donors'], 'donor'), [10])
        self.assertEqual(result['donors'][0]['distance_km'], 3.0)
        self.assertEqual(result['compatible_blood_types'], ['A+', 'A-', 'O+', 'O-'])
        self.assertEqual(result['total_matches'], 1)

    def test_unavailable_non_donor_and_distant_donors_are_excluded(self):
        request = blood_request(1, 'AB+')
        pool = [
            donor(1, 'A+', north_of(KATHMANDU, 5)),
            donor(2, 'A+', north_of(KATHMANDU, 5), available=False),
            donor(3, 'A+', north_of(KATHMANDU, 5), role='recipient'),
            donor(4, 'A+', north_of(KATHMANDU, 80)),
            donor(5, 'A+', UNKNOWN),
            donor(6, 'A+', north_of(KATHMANDU, 2), role='both'),
        ]
        result = find_donors(request, pool, max_distance_km=50)

        self.assertEqual(ids(result['donors'], 'donor'), [6, 1])

    def test_nearest_first_and_limit_applies_after_counting(self):
        request = blood_request(1, 'O+')
        pool = [donor(pk, 'O+', north_of(KATHMANDU, km)) for pk, km in ((1, 9), (2, 4), (3, 7), (4, 1))]
        result = find_donors(request, pool, limit=2)

        self.assertEqual(ids(result['donors'], 'donor'), [4, 2])
        self.assertEqual(result['total_matches'], 4)

        self.assertEqual(len(find_donors(request, pool, limit=None)['donors']), 4)

    def test_distance_boundary_uses_unrounded_value(self):
        request = blood_request(1, 'O+')
        pool = [donor(1, 'O+', north_of(KATHMANDU, 10.04))]

        self.assertEqual(find_donors(request, pool, max_distance_km=10)['donors'], [])
        self.assertEqual(find_donors(request, pool, max_distance_km=10.1)['donors'][0]['distance_km'], 10.0)

    def test_request_without_location_ranks_by_time_since_donation(self):
        request = blood_request(1, 'B-', location=UNKNOWN)
        pool = [
            donor(1, 'O-', last_donation_date=TODAY - timedelta(days=60)),
            donor(2, 'B-', last_donation_date=TODAY - timedelta(days=300)),
            donor(3, 'O-', location=UNKNOWN),
        ]
        result = find_donors(request, pool)

        self.assertEqual(ids(result['donors'], 'donor'), [3, 2, 1])
        self.assertTrue(all(m['distance_km'] is None for m in result['donors']))

    def test_request_must_be_open(self):
        for status in ('partially_fulfilled', 'fulfilled', 'cancelled'):
            with self.assertRaises(RequestNotOpen):
                find_donors(blood_request(1, 'A+', status=status), [])

    def test_invalid_request_blood_type(self):
        with self.assertRaises(InvalidBloodType):
            find_donors(blood_request(1, 'Z+'), [])


class FindRequestsTests(SimpleTestCase):

    def test_more_urgent_requests_rank_first(self):
        me = donor(1, 'O-')
        pool = [
            blood_request(10, 'A+', north_of(KATHMANDU, 1), urgency='low'),
            blood_request(11, 'B+', north_of(KATHMANDU, 20), urgency='critical'),
            blood_request(12, 'O-', north_of(KATHMANDU, 5), urgency='high'),
            blood_request(13, 'AB-', north_of(KATHMANDU, 2), urgency='high'),
        ]
        result = find_requests(me, pool, today=TODAY)

        self.assertEqual(ids(result['requests'], 'request'), [11, 13, 12, 10])
        self.assertEqual(len(result['can_donate_to']), 8)
        self.assertEqual(result['donor_blood_type'], 'O-')

    def test_incompatible_closed_and_expired_requests_are_excluded(self):
        me = donor(1, 'A+')
        pool = [
            blood_request(1, 'A+'),
            blood_request(2, 'O+'),
            blood_request(3, 'AB+', status='fulfilled'),
            blood_request(4, 'AB+', needed_by=TODAY - timedelta(days=1)),
            blood_request(5, 'AB+', needed_by=TODAY),
            blood_request(6, 'A+', north_of(KATHMANDU, 60)),
        ]
        result = find_requests(me, pool, today=TODAY)

        self.assertEqual(sorted(ids(result['requests'], 'request')), [1, 5])

    def test_unlocated_requests_follow_located_ones_of_same_urgency(self):
        me = donor(1, 'O+')
        pool = [
            blood_request(1, 'O+', UNKNOWN, urgency='high'),
            blood_request(2, 'O+', north_of(KATHMANDU, 30), urgency='high'),
            blood_request(3, 'O+', UNKNOWN, urgency='medium'),
        ]
        result = find_requests(me, pool, today=TODAY)

        self.assertEqual(ids(result['requests'], 'request'), [2, 1, 3])
        self.assertIsNone(result['requests'][1]['distance_km'])

    def test_deadline_breaks_ties(self):
        me = donor(1, 'O+', location=UNKNOWN)
        pool = [
            blood_request(1, 'O+', needed_by=TODAY + timedelta(days=9)),
            blood_request(2, 'O+', needed_by=TODAY + timedelta(days=2)),
        ]
        result = find_requests(me, pool, today=TODAY)

        self.assertEqual(ids(result['requests'], 'request'), [2, 1])

    def test_urgency_filter_and_limit(self):
        me = donor(1, 'O+')
        pool = [blood_request(pk, 'O+', urgency='critical' if pk % 2 else 'low') for pk in range(1, 7)]
        result = find_requests(me, pool, urgency='critical', limit=2, today=TODAY)

        self.assertEqual(result['total_matches'], 3)
        self.assertEqual(len(result['requests']), 2)
        self.assertTrue(all(m['request'].urgency == 'critical' for m in result['requests']))

    def test_recipient_cannot_search(self):
        with self.assertRaises(NotADonor):
            find_requests(donor(1, 'O+', role='recipient'), [], today=TODAY)
