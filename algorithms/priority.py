# algorithms/priority.py
"""
Urgency ranking for blood requests.
Lower rank = more urgent; used as the primary sort key when matching requests to a donor.
"""

URGENCY_CHOICES = [
    ('low', 'Low'),
    ('medium', 'Medium'),
    ('high', 'High'),
    ('critical', 'Critical - Life Threatening'),
]

URGENCY_RANK = {
    'critical': 1,
    'high': 2,
    'medium': 3,
    'low': 4,
}

# Unknown urgency values sort after every known level
UNRANKED = len(URGENCY_RANK) + 1


def urgency_rank(urgency_level):
    return URGENCY_RANK.get(urgency_level, UNRANKED)