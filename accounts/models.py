from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models

from .eligibility import is_eligible, next_eligible_date


BLOOD_TYPE_CHOICES = [
    ('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'),
    ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-'),
]
BLOOD_TYPES = tuple(value for value, _ in BLOOD_TYPE_CHOICES)

ROLE_CHOICES = [
    ('admin', 'Admin'),
    ('donor', 'Donor'),
    ('recipient', 'Recipient'),
]

GENDER_CHOICES = [
    ('male', 'Male'),
    ('female', 'Female'),
    ('other', 'Other'),
]


class UserManager(DjangoUserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'admin')
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='donor')
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, null=True, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    address = models.JSONField(default=dict, blank=True)  # street, city, state, zip_code, country
    medical_history = models.JSONField(default=dict, blank=True)  # conditions, medications, allergies

    # Written only by donation completion
    last_donation = models.DateTimeField(null=True, blank=True)
    donation_count = models.PositiveIntegerField(default=0)
    is_eligible = models.BooleanField(default=True)

    objects = UserManager()

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def is_donor(self):
        return self.role == 'donor'

    @property
    def is_recipient(self):
        return self.role == 'recipient'

    def check_eligibility(self, now=None):
        """Authoritative eligibility; the stored is_eligible flag is only a cache."""
        return is_eligible(self.last_donation, now)

    @property
    def next_eligible_date(self):
        return next_eligible_date(self.last_donation)
