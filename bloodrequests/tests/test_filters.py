from datetime import date, timedelta

from django.test import TestCase

from bloodrequests.filters import BloodRequestFilter
from bloodrequests.models import BloodRequest
from donations.tests.factories import make_request


class BloodRequestFilterTests(TestCase):

    def setUp(self):
        self.soon = make_request('A+', city='Kathmandu', urgency='critical',
                                 needed_by=date.today() + timedelta(days=1))
        self.later = make_request('O-', city='Pokhara', urgency='low',
                                  needed_by=date.today() + timedelta(days=20))

    def filtered(self, **params):
        return list(BloodRequestFilter(params, queryset=BloodRequest.objects.order_by('pk')).qs)

    def test_city_is_case_insensitive_substring(self):
        self.assertEqual(self.filtered(city='POKH'), [self.later])

    def test_urgency_and_blood_type(self):
        self.assertEqual(self.filtered(urgency='critical', blood_type='A+'), [self.soon])
        self.assertEqual(self.filtered(urgency='critical', blood_type='O-'), [])

    def test_needed_after(self):
        cutoff = (date.today() + timedelta(days=10)).isoformat()
        self.assertEqual(self.filtered(needed_after=cutoff), [self.later])

    def test_unknown_choice_is_invalid(self):
        self.assertFalse(BloodRequestFilter({'urgency': 'someday'}, queryset=BloodRequest.objects.all()).is_valid())
