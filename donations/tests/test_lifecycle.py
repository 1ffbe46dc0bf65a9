from datetime import date, timedelta
from unittest import mock

from django.core import mail
from django.db import IntegrityError
from django.db.models.query import QuerySet
from django.test import TestCase, override_settings

from algorithms.exceptions import (
    DonationNotFound,
    DonorUnavailable,
    DuplicateDonation,
    IncompatibleBloodType,
    InvalidStatus,
    InvalidTransition,
    InvalidUnits,
    NotADonor,
    NotEligible,
    RequestNotFound,
    RequestNotOpen,
    Unauthorized,
)
from donations import services
from donations.models import Donation
from donations.notifications import Notifier

from .factories import RecordingNotifier, make_donor, make_request, make_user


class BrokenNotifier(Notifier):
    def donor_offered(self, donation):
        raise ConnectionError("SMTP down")

    def donation_status_changed(self, donation):
        raise ConnectionError("SMTP down")


class ExpressInterestTests(TestCase):

    def setUp(self):
        self.notifier = RecordingNotifier()
        self.donor = make_donor('O-')
        self.request = make_request('A+')

    def test_creates_pending_donation_and_notifies_requester(self):
        donation = services.express_interest(
            self.donor.user, self.request.pk, units=2, notes='Can come after 5pm', notifier=self.notifier,
        )

        self.assertEqual(donation.status, 'pending')
        self.assertEqual(donation.units, 2)
        self.assertEqual(donation.notes, 'Can come after 5pm')
        self.assertEqual(self.notifier.events, [('donor_offered', donation.pk)])

    def test_second_offer_is_rejected_and_nothing_is_added(self):
        services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        with self.assertRaises(DuplicateDonation):
            services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        self.assertEqual(Donation.objects.filter(blood_request=self.request, donor=self.donor).count(), 1)
        self.assertEqual(len(self.notifier.events), 1)

    def test_units_below_one_are_rejected(self):
        for units in (0, -1):
            with self.assertRaises(InvalidUnits):
                services.express_interest(self.donor.user, self.request.pk, units=units, notifier=self.notifier)
        self.assertFalse(Donation.objects.exists())

    def test_concurrent_duplicate_insert_is_reported_as_duplicate(self):
        services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        # The earlier-offer check misses the row a concurrent request just wrote
        with mock.patch.object(QuerySet, "exists", autospec=True, side_effect=[False, True]):
            with self.assertRaises(DuplicateDonation):
                services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        self.assertEqual(Donation.objects.filter(blood_request=self.request, donor=self.donor).count(), 1)

    def test_other_integrity_errors_propagate(self):
        failure = IntegrityError("CHECK constraint failed: units")
        with mock.patch.object(Donation.objects, "create", side_effect=failure):
            with self.assertRaises(IntegrityError):
                services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        self.assertEqual(self.notifier.events, [])

    def test_recipient_cannot_offer(self):
        with self.assertRaises(NotADonor):
            services.express_interest(make_user(role='recipient'), self.request.pk, notifier=self.notifier)

    def test_donor_role_without_profile(self):
        with self.assertRaises(NotADonor):
            services.express_interest(make_user(role='donor'), self.request.pk, notifier=self.notifier)

    def test_unavailable_donor(self):
        self.donor.is_available = False
        self.donor.save()
        with self.assertRaises(DonorUnavailable):
            services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

    def test_recent_donor_is_not_eligible(self):
        self.donor.last_donation_date = date.today() - timedelta(days=20)
        self.donor.save()

        with self.assertRaises(NotEligible) as ctx:
            services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

        self.assertEqual(ctx.exception.eligibility.date_eligibility.days_until_eligible, 36)
        self.assertFalse(Donation.objects.exists())

    def test_missing_request(self):
        with self.assertRaises(RequestNotFound):
            services.express_interest(self.donor.user, 999999, notifier=self.notifier)

    def test_closed_request(self):
        self.request.status = 'fulfilled'
        self.request.save()
        with self.assertRaises(RequestNotOpen):
            services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)

    def test_partially_fulfilled_request_still_accepts_offers(self):
        self.request.status = 'partially_fulfilled'
        self.request.save()
        donation = services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)
        self.assertEqual(donation.status, 'pending')

    def test_incompatible_blood_type(self):
        b_positive = make_donor('B+')
        with self.assertRaises(IncompatibleBloodType):
            services.express_interest(b_positive.user, self.request.pk, notifier=self.notifier)

    def test_failing_notifier_does_not_undo_the_offer(self):
        with self.assertLogs('donations.notifications', level='ERROR'):
            donation = services.express_interest(self.donor.user, self.request.pk, notifier=BrokenNotifier())

        self.assertTrue(Donation.objects.filter(pk=donation.pk).exists())


class SetStatusTests(TestCase):

    def setUp(self):
        self.notifier = RecordingNotifier()
        self.donor = make_donor('O-')
        self.request = make_request('A+', units_needed=2)
        self.owner = self.request.requester
        self.donation = services.express_interest(self.donor.user, self.request.pk, notifier=self.notifier)
        self.notifier.events.clear()

    def set_status(self, status, user=None, **kwargs):
        return services.set_status(user or self.owner, self.donation.pk, status, notifier=self.notifier, **kwargs)

    def test_confirm_notifies_donor(self):
        donation = self.set_status('confirmed')

        self.assertEqual(donation.status, 'confirmed')
        self.assertEqual(self.notifier.events, [('donation_status_changed', donation.pk, 'confirmed')])

    def test_completion_partially_fulfils_request(self):
        self.set_status('confirmed')
        donation = self.set_status('completed', donation_date=date(2024, 6, 1), notes='Went well')

        self.assertEqual(donation.donation_date, date(2024, 6, 1))
        self.assertEqual(donation.notes, 'Went well')
        self.request.refresh_from_db()
        self.assertEqual(self.request.status, 'partially_fulfilled')
        # completed is not a notify status
        self.assertEqual(len(self.notifier.events), 1)

    def test_enough_completed_units_fulfil_request(self):
        second = make_donor('A+')
        other = services.express_interest(second.user, self.request.pk, notifier=self.notifier)
        for donation_id in (self.donation.pk, other.pk):
            services.set_status(self.owner, donation_id, 'confirmed', notifier=self.notifier)
            services.set_status(self.owner, donation_id, 'completed', notifier=self.notifier)

        self.request.refresh_from_db()
        self.assertEqual(self.request.status, 'fulfilled')

    def test_donor_may_cancel_own_offer(self):
        donation = self.set_status('cancelled', user=self.donor.user)
        self.assertEqual(donation.status, 'cancelled')

    def test_pending_cannot_jump_to_completed(self):
        with self.assertRaises(InvalidTransition):
            self.set_status('completed')
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, 'pending')

    def test_cancelled_is_terminal(self):
        self.set_status('cancelled')
        with self.assertRaises(InvalidTransition):
            self.set_status('confirmed')

    def test_same_status_updates_notes_without_notifying(self):
        self.set_status('confirmed')
        donation = self.set_status('confirmed', notes='Bring ID')

        self.assertEqual(donation.notes, 'Bring ID')
        self.assertEqual(len(self.notifier.events), 1)

    def test_unknown_status(self):
        with self.assertRaises(InvalidStatus):
            self.set_status('approved')

    def test_unknown_donation(self):
        with self.assertRaises(DonationNotFound):
            services.set_status(self.owner, 999999, 'confirmed', notifier=self.notifier)

    def test_stranger_cannot_change_status(self):
        with self.assertRaises(Unauthorized):
            self.set_status('confirmed', user=make_user(role='recipient'))

    def test_completion_leaves_last_donation_date_alone_by_default(self):
        self.set_status('confirmed')
        self.set_status('completed', donation_date=date(2024, 6, 1))
        self.donor.refresh_from_db()
        self.assertIsNone(self.donor.last_donation_date)

    @override_settings(DONATION_COMPLETION_UPDATES_LAST_DONATION=True)
    def test_completion_can_record_last_donation_date(self):
        self.set_status('confirmed')
        self.set_status('completed', donation_date=date(2024, 6, 1))
        self.donor.refresh_from_db()
        self.assertEqual(self.donor.last_donation_date, date(2024, 6, 1))

    def test_failing_notifier_does_not_undo_transition(self):
        with self.assertLogs('donations.notifications', level='ERROR'):
            services.set_status(self.owner, self.donation.pk, 'confirmed', notifier=BrokenNotifier())
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, 'confirmed')


class QueryTests(TestCase):

    def setUp(self):
        self.request = make_request('AB+')
        self.owner = self.request.requester
        self.donors = [make_donor(t) for t in ('A+', 'B+', 'O-', 'AB-')]
        self.donations = [
            services.express_interest(d.user, self.request.pk, notifier=RecordingNotifier())
            for d in self.donors
        ]

    def test_request_donations_are_ordered_by_status(self):
        first, second, third, fourth = (d.pk for d in self.donations)
        services.set_status(self.owner, first, 'cancelled', notifier=RecordingNotifier())
        services.set_status(self.owner, second, 'confirmed', notifier=RecordingNotifier())
        services.set_status(self.owner, third, 'confirmed', notifier=RecordingNotifier())
        services.set_status(self.owner, third, 'completed', notifier=RecordingNotifier())

        _, donations = services.donations_for_request(self.owner, self.request.pk)
        self.assertEqual([d.status for d in donations], ['confirmed', 'pending', 'completed', 'cancelled'])
        self.assertEqual(donations[1].pk, fourth)

    def test_only_requester_sees_donations(self):
        with self.assertRaises(Unauthorized):
            services.donations_for_request(self.donors[0].user, self.request.pk)
        with self.assertRaises(RequestNotFound):
            services.donations_for_request(self.owner, 999999)

    def test_donor_history(self):
        donor = self.donors[0]
        donation = self.donations[0]
        services.set_status(self.owner, donation.pk, 'confirmed', notifier=RecordingNotifier())
        services.set_status(
            self.owner, donation.pk, 'completed', donation_date=date(2024, 5, 2), notifier=RecordingNotifier(),
        )

        self.assertEqual(list(services.donations_for_donor(donor.user)), [donation])
        self.assertEqual(services.donation_history_summary(donor), {
            'total_donations': 1,
            'completed_donations': 1,
            'last_completed_donation': date(2024, 5, 2),
        })


@override_settings(NOTIFICATIONS_ENABLED=True)
class EmailNotificationTests(TestCase):

    def test_offer_emails_requester_after_commit(self):
        donor = make_donor('O-')
        request = make_request('A+')

        with self.captureOnCommitCallbacks(execute=True):
            services.express_interest(donor.user, request.pk)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [request.requester.email])
        self.assertIn(donor.full_name, mail.outbox[0].body)

    def test_confirmation_emails_donor(self):
        donor = make_donor('O-')
        request = make_request('A+')
        donation = services.express_interest(donor.user, request.pk, notifier=RecordingNotifier())

        with self.captureOnCommitCallbacks(execute=True):
            services.set_status(request.requester, donation.pk, 'confirmed')

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Your Donation Has Been Confirmed')
        self.assertEqual(mail.outbox[0].to, [donor.user.email])

    @override_settings(NOTIFICATIONS_ENABLED=False)
    def test_disabled_notifications_send_nothing(self):
        donor = make_donor('O-')
        request = make_request('A+')

        with self.captureOnCommitCallbacks(execute=True):
            services.express_interest(donor.user, request.pk)

        self.assertEqual(mail.outbox, [])
