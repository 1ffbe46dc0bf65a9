from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    ROLE_CHOICES = (
        ('donor', 'Donor'),
        ('recipient', 'Recipient'),
        ('both', 'Donor & Recipient'),
        ('admin', 'Admin'),
    )
    DONOR_ROLES = ('donor', 'both')

    role = models.CharField(
        max_length=15,
        choices=ROLE_CHOICES,
        default='donor'
    )
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_donor(self):
        return self.role in self.DONOR_ROLES

    @property
    def is_admin(self):
        return self.role == 'admin' or self.is_superuser
