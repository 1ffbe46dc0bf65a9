"""
Donation lifecycle.

    pending -> confirmed | cancelled
    confirmed -> completed | cancelled
    completed, cancelled: terminal

Every business-rule check runs before anything is written. Notifications
go through the injected Notifier and can never fail a transition.
"""
import logging
from datetime import date

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Case, Count, IntegerField, Max, Q, Sum, Value, When

from algorithms.blood_compatibility import is_compatible
from algorithms.eligibility import evaluate
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
from bloodrequests.models import BloodRequest
from donations.models import Donation
from donations.notifications import dispatch, get_notifier

logger = logging.getLogger(__name__)

TRANSITIONS = {
    'pending': {'confirmed', 'cancelled'},
    'confirmed': {'completed', 'cancelled'},
    'completed': set(),
    'cancelled': set(),
}

# Status changes the donor hears about
NOTIFY_DONOR_ON = ('confirmed', 'cancelled')


def donor_profile_for(user):
    """The caller's DonorProfile, or NotADonor when they cannot donate"""
    if not getattr(user, 'is_donor', False):
        raise NotADonor()
    profile = getattr(user, 'donor_profile', None)
    if profile is None:
        raise NotADonor("Complete your donor profile before donating")
    return profile


def express_interest(user, request_id, units=1, notes=None, notifier=None, now=None):
    """
    Record a donor's offer to fulfil a blood request.

    Checks, in order: units of at least 1, donor role, availability,
    eligibility, request is accepting offers, blood type compatibility,
    no earlier offer.

    Returns:
        the new pending Donation
    """
    if units < 1:
        raise InvalidUnits()

    donor = donor_profile_for(user)

    if not donor.is_available:
        raise DonorUnavailable()

    eligibility = evaluate(donor, now)
    if not eligibility.eligible:
        raise NotEligible(eligibility)

    blood_request = BloodRequest.objects.filter(pk=request_id).first()
    if blood_request is None:
        raise RequestNotFound()
    if not blood_request.is_accepting_donations:
        raise RequestNotOpen("Blood request not found or already fulfilled")

    if not is_compatible(donor.blood_type, blood_request.blood_type):
        raise IncompatibleBloodType(donor.blood_type, blood_request.blood_type)

    existing = Donation.objects.filter(blood_request=blood_request, donor=donor)
    if existing.exists():
        raise DuplicateDonation()

    try:
        with transaction.atomic():
            donation = Donation.objects.create(
                blood_request=blood_request,
                donor=donor,
                units=units,
                notes=notes or '',
                status='pending',
            )
    except IntegrityError:
        # Only the (request, donor) uniqueness race maps to DuplicateDonation
        if existing.exists():
            raise DuplicateDonation()
        raise

    logger.info("Donor %s offered %d unit(s) to request %s", donor.pk, units, blood_request.pk)
    dispatch(notifier or get_notifier(), 'donor_offered', donation)
    return donation


def set_status(user, donation_id, new_status, donation_date=None, notes=None, notifier=None):
    """
    Move a donation to new_status.

    Only the request's requester or the donation's donor may do this.
    donation_date and notes overwrite the stored values only when given.
    Re-applying the current status is allowed, to update date or notes.
    """
    if new_status not in Donation.STATUSES:
        raise InvalidStatus(f"Invalid status: {new_status!r}")

    with transaction.atomic():
        donation = (
            Donation.objects.select_for_update(of=('self',))
            .select_related('blood_request', 'donor')
            .filter(pk=donation_id)
            .first()
        )
        if donation is None:
            raise DonationNotFound()

        if user.pk not in (donation.blood_request.requester_id, donation.donor.user_id):
            raise Unauthorized("You don't have permission to update this donation")

        previous = donation.status
        if new_status != previous and new_status not in TRANSITIONS[previous]:
            raise InvalidTransition(previous, new_status)

        donation.status = new_status
        if donation_date is not None:
            donation.donation_date = donation_date
        if notes:
            donation.notes = notes
        donation.save(update_fields=['status', 'donation_date', 'notes', 'updated_at'])

        if new_status == 'completed' and previous != 'completed':
            _on_completed(donation)

    logger.info("Donation %s: %s -> %s by user %s", donation.pk, previous, new_status, user.pk)

    if new_status in NOTIFY_DONOR_ON and new_status != previous:
        dispatch(notifier or get_notifier(), 'donation_status_changed', donation)
    return donation


def _on_completed(donation):
    refresh_request_status(donation.blood_request)

    if getattr(settings, 'DONATION_COMPLETION_UPDATES_LAST_DONATION', False):
        donor = donation.donor
        donor.last_donation_date = donation.donation_date or date.today()
        donor.save(update_fields=['last_donation_date', 'updated_at'])


def refresh_request_status(blood_request):
    """
    Mark a request fulfilled or partially fulfilled from its completed units.
    Cancelled and already fulfilled requests are left alone.
    """
    if not blood_request.is_accepting_donations:
        return blood_request

    completed_units = blood_request.donations.filter(status='completed').aggregate(
        total=Sum('units')
    )['total'] or 0

    if completed_units >= blood_request.units_needed:
        new_status = 'fulfilled'
    elif completed_units > 0:
        new_status = 'partially_fulfilled'
    else:
        new_status = 'open'

    if new_status != blood_request.status:
        logger.info(
            "Request %s is now %s (%d/%d units)",
            blood_request.pk, new_status, completed_units, blood_request.units_needed,
        )
        blood_request.status = new_status
        blood_request.save(update_fields=['status', 'updated_at'])
    return blood_request


def donations_for_request(user, request_id):
    """
    All offers on a request, for its requester only.
    Confirmed first, then pending, completed, cancelled; newest first within each.
    """
    blood_request = BloodRequest.objects.filter(pk=request_id).first()
    if blood_request is None:
        raise RequestNotFound()
    if blood_request.requester_id != user.pk:
        raise Unauthorized("You don't have permission to view these donations")

    status_rank = Case(
        *[When(status=s, then=Value(rank)) for s, rank in Donation.STATUS_ORDER.items()],
        output_field=IntegerField(),
    )
    donations = (
        Donation.objects.filter(blood_request=blood_request)
        .select_related('donor', 'donor__user')
        .annotate(status_rank=status_rank)
        .order_by('status_rank', '-created_at')
    )
    return blood_request, donations


def donations_for_donor(user):
    donor = donor_profile_for(user)
    return (
        Donation.objects.filter(donor=donor)
        .select_related('blood_request', 'blood_request__requester')
        .order_by('-created_at')
    )


def donation_history_summary(donor):
    return Donation.objects.filter(donor=donor).aggregate(
        total_donations=Count('id'),
        completed_donations=Count('id', filter=Q(status='completed')),
        last_completed_donation=Max('donation_date', filter=Q(status='completed')),
    )
