# donations/tasks.py
"""
Celery tasks for donor and requester email notifications
"""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from algorithms.eligibility import evaluate
from algorithms.exceptions import MatchingError
from algorithms.matching import DONOR_ROLES, find_donors

logger = logging.getLogger(__name__)


def _send(subject, message, recipient):
    """Send one plain-text email; returns False instead of raising"""
    if not recipient:
        return False
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
    except Exception:
        logger.exception("Email to %s failed: %s", recipient, subject)
        return False
    logger.info("Email sent to %s: %s", recipient, subject)
    return True


@shared_task
def notify_requester_about_donation(donation_id):
    """
    Tell the requester that a donor has offered to give blood
    """
    from donations.models import Donation

    donation = Donation.objects.select_related(
        'donor', 'donor__user', 'blood_request', 'blood_request__requester'
    ).filter(pk=donation_id).first()
    if donation is None:
        return f"Donation {donation_id} not found"

    donor = donation.donor
    blood_request = donation.blood_request
    requester = blood_request.requester

    message = f"""
A Donor Has Expressed Interest!

Dear {requester.get_full_name() or requester.username},

A compatible donor has expressed interest in your blood request.

Donor Information:
- Name: {donor.full_name}
- Blood Type: {donor.blood_type}
- Phone: {donor.user.phone or 'N/A'}
- City: {donor.city or 'N/A'}
- Units offered: {donation.units}

Your Request:
- Blood Type: {blood_request.blood_type}
- Units Needed: {blood_request.units_needed}
- Hospital: {blood_request.hospital_name}

Next Steps:
1. Contact the donor to coordinate the donation
2. Verify donation eligibility with hospital staff
3. Confirm the donation in the system once completed

View all donation offers: {settings.SITE_URL}/api/match/request/{blood_request.pk}/donations/
    """.strip()

    sent = _send("Good News! A Donor is Ready to Help", message, requester.email)
    return f"Requester notified for donation {donation_id}: {sent}"


@shared_task
def notify_donor_about_status(donation_id, status):
    """
    Tell the donor their offer was confirmed or cancelled
    """
    from donations.models import Donation

    donation = Donation.objects.select_related(
        'donor', 'donor__user', 'blood_request'
    ).filter(pk=donation_id).first()
    if donation is None:
        return f"Donation {donation_id} not found"

    donor = donation.donor
    blood_request = donation.blood_request

    if status == 'confirmed':
        subject = "Your Donation Has Been Confirmed"
        message = f"""
Your Donation Has Been Confirmed

Dear {donor.full_name},

Your donation offer has been confirmed! The patient is counting on you.

Donation Details:
- Blood Type: {blood_request.blood_type}
- Hospital: {blood_request.hospital_name}
- Address: {blood_request.hospital_address}
- Contact: {blood_request.contact_name} - {blood_request.contact_phone}
- Needed By: {blood_request.needed_by.isoformat()}

Before You Donate:
- Get adequate sleep the night before
- Eat a healthy meal and drink plenty of water
- Bring a valid ID
        """.strip()
    elif status == 'cancelled':
        subject = "Donation Request Cancelled"
        message = f"""
Donation Request Cancelled

Dear {donor.full_name},

Your donation offer for the {blood_request.blood_type} request at
{blood_request.hospital_name} has been cancelled.

Other patients may still need your help:
{settings.SITE_URL}/api/match/donor/requests/
        """.strip()
    else:
        return f"No email for status {status}"

    sent = _send(subject, message, donor.user.email)
    return f"Donor notified for donation {donation_id} ({status}): {sent}"


@shared_task
def notify_donor_about_match(donor_id, request_id, distance_km=None):
    """
    Alert one donor about a request they are a compatible match for
    """
    from bloodrequests.models import BloodRequest
    from donors.models import DonorProfile

    donor = DonorProfile.objects.select_related('user').filter(pk=donor_id).first()
    blood_request = BloodRequest.objects.filter(pk=request_id).first()
    if donor is None or blood_request is None:
        return f"Donor {donor_id} or request {request_id} not found"

    distance = f"{distance_km} km from you" if distance_km is not None else "distance unknown"
    message = f"""
Your Blood Can Save a Life!

Dear {donor.full_name},

A patient needs {blood_request.blood_type} blood, and you're a compatible match.

Request Details:
- Blood Type: {blood_request.blood_type}
- Units Needed: {blood_request.units_needed}
- Urgency: {blood_request.urgency.upper()}
- Hospital: {blood_request.hospital_name} ({distance})
- Location: {blood_request.city}
- Needed By: {blood_request.needed_by.isoformat()}

Offer to donate: {settings.SITE_URL}/api/match/donate/{blood_request.pk}/
    """.strip()

    sent = _send(f"Urgent: Blood Needed - {blood_request.blood_type}", message, donor.user.email)
    return f"Match alert for request {request_id} to donor {donor_id}: {sent}"


@shared_task
def send_match_alerts(request_id):
    """
    Run the donor matcher for a new request and alert the best-ranked
    donors who are currently eligible to give.
    Called after a BloodRequest is committed in open status.
    """
    from bloodrequests.models import BloodRequest
    from donations.notifications import dispatch, get_notifier
    from donors.models import DonorProfile

    blood_request = BloodRequest.objects.filter(pk=request_id).first()
    if blood_request is None:
        return f"Blood request {request_id} not found"

    pool = DonorProfile.objects.select_related('user').filter(
        is_available=True,
        user__is_active=True,
        user__role__in=DONOR_ROLES,
    )
    try:
        # Rank the whole pool: ineligible donors must not use up the alert budget
        result = find_donors(
            blood_request,
            pool,
            max_distance_km=settings.MATCH_DEFAULT_MAX_DISTANCE_KM,
            limit=None,
        )
    except MatchingError as e:
        logger.warning("No match alerts for request %s: %s", request_id, e)
        return f"Request {request_id} not matchable: {e}"

    eligible = [match for match in result['donors'] if evaluate(match['donor']).eligible]

    notifier = get_notifier()
    alerted = 0
    for match in eligible[:settings.MATCH_ALERT_LIMIT]:
        dispatch(notifier, 'match_alert', match['donor'], blood_request, match['distance_km'])
        alerted += 1

    logger.info("Alerted %d of %d matched donors for request %s", alerted, result['total_matches'], request_id)
    return f"Alerted {alerted} donors for request {request_id}"
