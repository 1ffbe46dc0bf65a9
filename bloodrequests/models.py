# bloodrequests/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES
from algorithms.haversine import GeoPoint
from algorithms.priority import URGENCY_CHOICES


class BloodRequest(models.Model):
    STATUS_CHOICES = [
        ('open', 'Open'),
        ('partially_fulfilled', 'Partially Fulfilled'),
        ('fulfilled', 'Fulfilled'),
        ('cancelled', 'Cancelled'),
    ]
    # Donors may still offer blood to requests in these states
    ACCEPTING_STATUSES = ('open', 'partially_fulfilled')

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blood_requests'
    )
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    units_needed = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default='medium')

    hospital_name = models.CharField(max_length=200)
    hospital_address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)

    # Geolocation (optional)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    contact_name = models.CharField(max_length=200, blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    needed_by = models.DateField()
    description = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='open', db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.hospital_name} - {self.blood_type} ({self.urgency})"

    @property
    def location(self):
        return GeoPoint(self.latitude, self.longitude)

    @property
    def is_accepting_donations(self):
        return self.status in self.ACCEPTING_STATUSES

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Blood Request'
        verbose_name_plural = 'Blood Requests'
        indexes = [
            models.Index(fields=['status', 'blood_type'], name='request_status_bloodtype_idx'),
        ]
