# bloodrequests/signals.py
"""
Signals to alert matching donors when a blood request is created
"""
import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from bloodrequests.models import BloodRequest

logger = logging.getLogger(__name__)


@receiver(post_save, sender=BloodRequest)
def auto_alert_matching_donors(sender, instance, created, **kwargs):
    """
    Schedule match alerts once the new open request is committed
    """
    if not (created and instance.status == 'open'):
        return

    from donations.tasks import send_match_alerts

    def schedule():
        try:
            send_match_alerts.delay(instance.pk)
        except Exception:
            logger.exception("Could not schedule match alerts for blood request %s", instance.pk)

    transaction.on_commit(schedule)
