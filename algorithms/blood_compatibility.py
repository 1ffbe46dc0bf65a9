"""
Blood Type Compatibility Helper
Determines which donor blood types can donate to which recipient blood types
"""
from types import MappingProxyType

from algorithms.exceptions import InvalidBloodType

BLOOD_TYPES = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')

BLOOD_TYPE_CHOICES = [(t, t) for t in BLOOD_TYPES]

# Recipient blood type -> donor blood types that may give to it
COMPATIBILITY = MappingProxyType({
    'A+': frozenset({'A+', 'A-', 'O+', 'O-'}),
    'A-': frozenset({'A-', 'O-'}),
    'B+': frozenset({'B+', 'B-', 'O+', 'O-'}),
    'B-': frozenset({'B-', 'O-'}),
    'AB+': frozenset(BLOOD_TYPES),  # Universal recipient
    'AB-': frozenset({'A-', 'B-', 'AB-', 'O-'}),
    'O+': frozenset({'O+', 'O-'}),
    'O-': frozenset({'O-'}),
})


def _build_recipient_table(compatibility):
    recipients = {}
    for recipient_type, donors in compatibility.items():
        for donor_type in donors:
            recipients.setdefault(donor_type, set()).add(recipient_type)
    return MappingProxyType({k: frozenset(v) for k, v in recipients.items()})


# Derived from COMPATIBILITY so the two directions can never disagree
RECIPIENTS = _build_recipient_table(COMPATIBILITY)


def validate_blood_type(blood_type):
    if blood_type not in COMPATIBILITY:
        raise InvalidBloodType(blood_type)
    return blood_type


def compatible_donors_for(recipient_blood_type) -> frozenset:
    """
    Get the blood types that can donate to a recipient

    Args:
        recipient_blood_type: Recipient's blood type (e.g., 'A+')

    Returns:
        frozenset of compatible donor blood types

    Raises:
        InvalidBloodType: if the type is not one of the eight ABO/Rh types
    """
    return COMPATIBILITY[validate_blood_type(recipient_blood_type)]


def compatible_recipients_for(donor_blood_type) -> frozenset:
    """
    Get the blood types that can receive from a donor

    Args:
        donor_blood_type: Donor's blood type

    Returns:
        frozenset of compatible recipient blood types
    """
    return RECIPIENTS[validate_blood_type(donor_blood_type)]


def is_compatible(donor_blood_type, recipient_blood_type):
    """Check if donor blood type can give to the recipient blood type"""
    return donor_blood_type in compatible_donors_for(recipient_blood_type)


def sorted_types(blood_types):
    """Blood types in canonical order, for stable output"""
    return [t for t in BLOOD_TYPES if t in blood_types]
