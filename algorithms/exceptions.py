"""
Business-rule failures raised by the matching and eligibility engine.
The API layer translates these into HTTP responses (see api/exceptions.py).
"""


class MatchingError(Exception):
    code = 'matching_error'
    default_message = 'Matching failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidBloodType(MatchingError):
    code = 'invalid_blood_type'
    default_message = 'Invalid blood type'

    def __init__(self, blood_type=None):
        self.blood_type = blood_type
        super().__init__(f"Invalid blood type: {blood_type!r}")


class RequestNotFound(MatchingError):
    code = 'request_not_found'
    default_message = 'Blood request not found'


class RequestNotOpen(MatchingError):
    code = 'request_not_open'
    default_message = 'Blood request is not open'


class DonationNotFound(MatchingError):
    code = 'donation_not_found'
    default_message = 'Donation not found'


class NotADonor(MatchingError):
    code = 'not_a_donor'
    default_message = 'User is not registered as a donor'


class DonorUnavailable(MatchingError):
    code = 'donor_unavailable'
    default_message = 'Donor is currently not available'


class NotEligible(MatchingError):
    code = 'not_eligible'
    default_message = 'You are not currently eligible to donate'

    def __init__(self, eligibility, message=None):
        self.eligibility = eligibility
        super().__init__(message)


class IncompatibleBloodType(MatchingError):
    code = 'incompatible_blood_type'

    def __init__(self, donor_type, recipient_type):
        self.donor_type = donor_type
        self.recipient_type = recipient_type
        super().__init__(f"Blood type {donor_type} is not compatible with {recipient_type}")


class DuplicateDonation(MatchingError):
    code = 'duplicate_donation'
    default_message = 'You have already expressed interest in this request'


class Unauthorized(MatchingError):
    code = 'unauthorized'
    default_message = "You don't have permission to perform this action"


class InvalidStatus(MatchingError):
    code = 'invalid_status'
    default_message = 'Invalid status'


class InvalidTransition(InvalidStatus):
    code = 'invalid_transition'

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move a {current} donation to {requested}")


class InvalidUnits(MatchingError):
    code = 'invalid_units'
    default_message = 'Units must be a whole number of at least 1'
