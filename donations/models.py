from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
from django.conf import settings

from accounts.models import BLOOD_TYPE_CHOICES


class Inventory(models.Model):
    """Current stock for one blood type. Mutated only through InventoryService."""
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, unique=True)
    units_available = models.PositiveIntegerField(default=0)
    reserved_units = models.PositiveIntegerField(default=0)
    minimum_threshold = models.PositiveIntegerField(default=10)
    max_capacity = models.PositiveIntegerField(default=100)
    last_updated = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Inventories"
        ordering = ['blood_type']

    def __str__(self):
        return f"{self.blood_type}: {self.units_available} units"

    @property
    def is_low_stock(self):
        return self.units_available <= self.minimum_threshold

    @property
    def available_for_allocation(self):
        return max(0, self.units_available - self.reserved_units)


class ExpiringBatch(models.Model):
    """Units added with a known expiry date. Batches are never swept."""
    inventory = models.ForeignKey(Inventory, on_delete=models.CASCADE, related_name='expiring_batches')
    expiry_date = models.DateTimeField()
    units = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['expiry_date', 'id']
        verbose_name_plural = "Expiring batches"

    def __str__(self):
        return f"{self.units} x {self.inventory.blood_type} expiring {self.expiry_date:%Y-%m-%d}"


class Donation(models.Model):
    """Scheduled or completed donation by a donor"""
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('rejected', 'Rejected'),
    ]

    donor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='donations')
    donation_date = models.DateTimeField()
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    units_collected = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(2)]
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    location = models.JSONField(default=dict, blank=True)  # name, address, city, state
    pre_screening = models.JSONField(default=dict, blank=True)
    post_donation = models.JSONField(default=dict, blank=True)
    staff_member = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='processed_donations'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-donation_date']
        indexes = [
            models.Index(fields=['donor', '-donation_date'], name='donation_donor_date_idx'),
            models.Index(fields=['status', '-donation_date'], name='donation_status_date_idx'),
        ]

    def __str__(self):
        return f"Donation by {self.donor.username} ({self.blood_type}, {self.status})"


class BloodRequest(models.Model):
    """Blood request submitted by a recipient"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('fulfilled', 'Fulfilled'),
        ('cancelled', 'Cancelled'),
        ('expired', 'Expired'),
    ]
    URGENCY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]

    requester = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='blood_requests')
    patient_name = models.CharField(max_length=120)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    units_needed = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(10)])
    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default='medium')
    hospital_name = models.CharField(max_length=200)
    hospital_address = models.JSONField(default=dict, blank=True)  # street, city, state, zip_code, country
    contact_person = models.JSONField(default=dict, blank=True)  # name, phone, email
    medical_reason = models.TextField()
    required_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='approved_requests'
    )
    approved_date = models.DateTimeField(null=True, blank=True)
    fulfilled_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['blood_type', 'status', 'urgency'], name='request_type_status_idx'),
            models.Index(fields=['required_date'], name='request_required_date_idx'),
        ]

    def __str__(self):
        return f"Request for {self.units_needed} units of {self.blood_type} ({self.status})"


class InventoryTransaction(models.Model):
    """Audit log for all inventory changes"""
    TRANSACTION_TYPES = [
        ('donation', 'Donation'),
        ('request', 'Blood Request'),
        ('adjustment', 'Manual Adjustment'),
        ('restock', 'Restock'),
    ]

    inventory = models.ForeignKey(Inventory, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    quantity = models.IntegerField()  # negative for requests
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    reference_id = models.IntegerField(null=True, blank=True)  # id of the Donation/BloodRequest
    timestamp = models.DateTimeField(auto_now_add=True)
    notes = models.TextField(blank=True)

    def __str__(self):
        return f"{self.transaction_type}: {self.quantity} of {self.blood_type}"

    class Meta:
        ordering = ['-timestamp', '-id']
