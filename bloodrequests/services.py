import logging

from django.db import transaction

from algorithms.exceptions import RequestNotFound, RequestNotOpen, Unauthorized
from bloodrequests.models import BloodRequest

logger = logging.getLogger(__name__)


def cancel_request(user, request_id, reason=None):
    """
    Cancel a blood request and every pending donation offered to it.

    Allowed for the requester and for admins. Admin cancellations record the
    reason in the description. Cascaded donations are cancelled silently:
    donors are not emailed for bulk cancellations.

    Returns:
        (blood_request, number of donations cancelled)
    """
    from donations.models import Donation

    with transaction.atomic():
        blood_request = BloodRequest.objects.select_for_update().filter(pk=request_id).first()
        if blood_request is None:
            raise RequestNotFound()

        is_owner = blood_request.requester_id == user.pk
        is_admin = getattr(user, 'is_admin', False)
        if not (is_owner or is_admin):
            raise Unauthorized("You don't have permission to cancel this request")

        if not blood_request.is_accepting_donations:
            raise RequestNotOpen(f"Blood request is already {blood_request.status}")

        blood_request.status = 'cancelled'
        update_fields = ['status', 'updated_at']
        if is_admin and not is_owner:
            note = f"[Admin cancelled: {reason or 'No reason provided'}]"
            blood_request.description = f"{blood_request.description} {note}".strip()
            update_fields.append('description')
        blood_request.save(update_fields=update_fields)

        cancelled = Donation.objects.filter(
            blood_request=blood_request, status='pending'
        ).update(status='cancelled')

    logger.info(
        "Request %s cancelled by user %s; %d pending donation(s) cancelled",
        blood_request.pk, user.pk, cancelled,
    )
    return blood_request, cancelled
