"""
Notification port used by the donation lifecycle.

Sending mail is a side effect: a failure here is logged and never undoes
the state change that triggered it.
"""
import logging

from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)


class Notifier:
    """Interface the lifecycle talks to. Subclasses decide how messages travel."""

    def donor_offered(self, donation):
        raise NotImplementedError

    def donation_status_changed(self, donation):
        raise NotImplementedError

    def match_alert(self, donor, blood_request, distance_km=None):
        raise NotImplementedError


class NullNotifier(Notifier):
    def donor_offered(self, donation):
        logger.debug("Notifications disabled: donation %s offer not sent", donation.pk)

    def donation_status_changed(self, donation):
        logger.debug("Notifications disabled: donation %s status not sent", donation.pk)

    def match_alert(self, donor, blood_request, distance_km=None):
        logger.debug("Notifications disabled: match alert for donor %s not sent", donor.pk)


class EmailNotifier(Notifier):
    """
    Queue email tasks on Celery once the current transaction commits,
    so a rolled-back change never produces mail.
    """

    def _schedule(self, task, *args):
        def send():
            try:
                task.delay(*args)
            except Exception:
                logger.exception("Could not queue %s%r", task.name, args)

        transaction.on_commit(send)

    def donor_offered(self, donation):
        from donations.tasks import notify_requester_about_donation
        self._schedule(notify_requester_about_donation, donation.pk)

    def donation_status_changed(self, donation):
        from donations.tasks import notify_donor_about_status
        self._schedule(notify_donor_about_status, donation.pk, donation.status)

    def match_alert(self, donor, blood_request, distance_km=None):
        from donations.tasks import notify_donor_about_match
        self._schedule(notify_donor_about_match, donor.pk, blood_request.pk, distance_km)


def get_notifier():
    if getattr(settings, 'NOTIFICATIONS_ENABLED', True):
        return EmailNotifier()
    return NullNotifier()


def dispatch(notifier, event, *args):
    """Call one notifier hook, logging instead of raising on failure"""
    try:
        getattr(notifier, event)(*args)
    except Exception:
        logger.exception("Notification %s failed", event)
