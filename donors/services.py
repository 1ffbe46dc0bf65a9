import logging

from algorithms.eligibility import clean_conditions, evaluate

logger = logging.getLogger(__name__)

HEALTH_FIELDS = ('date_of_birth', 'weight_kg', 'health_conditions')


def update_health_info(profile, changes):
    """
    Apply the supplied health fields to a donor profile.

    Only keys present in changes are written; a key set to None clears the field.

    Returns:
        the fresh EligibilityStatus
    """
    update_fields = []
    for name in HEALTH_FIELDS:
        if name not in changes:
            continue
        value = changes[name]
        if name == 'health_conditions':
            value = clean_conditions(value)
        setattr(profile, name, value)
        update_fields.append(name)

    if update_fields:
        profile.save(update_fields=update_fields + ['updated_at'])
        logger.info("Donor %s updated health info: %s", profile.pk, ', '.join(update_fields))

    return evaluate(profile)
