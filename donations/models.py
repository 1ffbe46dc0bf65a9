from django.db import models

from bloodrequests.models import BloodRequest
from donors.models import DonorProfile


class Donation(models.Model):
    """
    A donor's offer to fulfil one blood request.
    Never deleted: cancellation is a status.
    """
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    STATUSES = tuple(value for value, _ in STATUS_CHOICES)

    # Display order when a requester reviews the offers on a request
    STATUS_ORDER = {
        'confirmed': 1,
        'pending': 2,
        'completed': 3,
        'cancelled': 4,
    }

    blood_request = models.ForeignKey(
        BloodRequest,
        on_delete=models.PROTECT,
        related_name='donations'
    )
    donor = models.ForeignKey(
        DonorProfile,
        on_delete=models.PROTECT,
        related_name='donations'
    )

    units = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')
    donation_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.donor.full_name} -> request #{self.blood_request_id} ({self.status})"

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['blood_request', 'donor'],
                name='unique_donation_per_request_donor',
            ),
        ]
        indexes = [
            models.Index(fields=['blood_request', 'status'], name='donation_request_status_idx'),
            models.Index(fields=['donor', '-created_at'], name='donation_donor_created_idx'),
        ]
