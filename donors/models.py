from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES
from algorithms.eligibility import evaluate
from algorithms.haversine import GeoPoint


# ---------------------------
# Donor Profile
# ---------------------------
class DonorProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='donor_profile'
    )

    full_name = models.CharField(max_length=200)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)

    # Geolocation (optional)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    # Donation tracking
    is_available = models.BooleanField(default=True)
    last_donation_date = models.DateField(null=True, blank=True)

    # Health info (optional)
    date_of_birth = models.DateField(null=True, blank=True)
    weight_kg = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    health_conditions = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def role(self):
        return self.user.role

    @property
    def location(self):
        return GeoPoint(self.latitude, self.longitude)

    def eligibility(self, now=None):
        return evaluate(self, now)

    @property
    def can_donate(self) -> bool:
        return self.eligibility().eligible

    def __str__(self):
        return f"{self.full_name} ({self.blood_type})"

    class Meta:
        verbose_name = "Donor Profile"
        verbose_name_plural = "Donor Profiles"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['blood_type', 'is_available'], name='donor_bloodtype_avail_idx'),
        ]
