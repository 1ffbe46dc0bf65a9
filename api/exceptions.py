"""
Translate matching-engine failures into HTTP responses.
Registered as REST_FRAMEWORK['EXCEPTION_HANDLER'].
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from algorithms.exceptions import (
    DonationNotFound,
    DonorUnavailable,
    DuplicateDonation,
    IncompatibleBloodType,
    InvalidBloodType,
    InvalidStatus,
    InvalidUnits,
    MatchingError,
    NotADonor,
    NotEligible,
    RequestNotFound,
    RequestNotOpen,
    Unauthorized,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    InvalidBloodType: status.HTTP_400_BAD_REQUEST,
    InvalidStatus: status.HTTP_400_BAD_REQUEST,
    InvalidUnits: status.HTTP_400_BAD_REQUEST,
    DonorUnavailable: status.HTTP_400_BAD_REQUEST,
    NotEligible: status.HTTP_400_BAD_REQUEST,
    IncompatibleBloodType: status.HTTP_400_BAD_REQUEST,
    DuplicateDonation: status.HTTP_400_BAD_REQUEST,
    RequestNotOpen: status.HTTP_409_CONFLICT,
    RequestNotFound: status.HTTP_404_NOT_FOUND,
    DonationNotFound: status.HTTP_404_NOT_FOUND,
    NotADonor: status.HTTP_403_FORBIDDEN,
    Unauthorized: status.HTTP_403_FORBIDDEN,
}


def status_code_for(exc):
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


def engine_exception_handler(exc, context):
    if not isinstance(exc, MatchingError):
        return exception_handler(exc, context)

    data = {'error': exc.message, 'code': exc.code}
    if isinstance(exc, NotEligible):
        eligibility = exc.eligibility
        data['eligibility'] = eligibility.to_dict()
        data['days_until_eligible'] = eligibility.date_eligibility.days_until_eligible
        data['next_eligible_date'] = eligibility.date_eligibility.next_eligible_date

    logger.info("%s rejected: %s", getattr(context.get('request'), 'path', ''), exc.code)
    return Response(data, status=status_code_for(exc))
