import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.eligibility import is_eligible
from accounts.exceptions import (
    NotFound, Forbidden, InvalidInput, IneligibleDonor, InvalidState, InsufficientStock
)
from accounts.models import BLOOD_TYPES
from .models import Inventory, ExpiringBatch, Donation, BloodRequest, InventoryTransaction
from .notifications import notify_new_request
from .states import DONATION_TRANSITIONS, REQUEST_TRANSITIONS, DELETABLE_REQUEST_STATUSES, check_transition

logger = logging.getLogger(__name__)
User = get_user_model()

INVENTORY_FIELDS = ('units_available', 'reserved_units', 'minimum_threshold', 'max_capacity')


def _lock(model, pk, label):
    try:
        return model.objects.select_for_update().get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(f"{label} not found")


class InventoryService:
    """
    Owns every change to Inventory rows.

    Increments and the conditional decrement are single UPDATE statements,
    so concurrent callers can never push units_available below zero.
    """

    @staticmethod
    def validate_blood_type(blood_type):
        if blood_type not in BLOOD_TYPES:
            raise InvalidInput(f"Unknown blood type '{blood_type}'")
        return blood_type

    @classmethod
    def seed(cls, units=0):
        """Create default records for any blood type that has none. Returns the number created."""
        existing = set(Inventory.objects.values_list('blood_type', flat=True))
        missing = [
            Inventory(
                blood_type=blood_type,
                units_available=units,
                minimum_threshold=settings.BLOODBANK['DEFAULT_MINIMUM_THRESHOLD'],
                max_capacity=settings.BLOODBANK['DEFAULT_MAX_CAPACITY'],
            )
            for blood_type in BLOOD_TYPES if blood_type not in existing
        ]
        if missing:
            Inventory.objects.bulk_create(missing, ignore_conflicts=True)
            logger.info("Seeded inventory for %s", ", ".join(i.blood_type for i in missing))
        return len(missing)

    @classmethod
    def list_all(cls):
        if Inventory.objects.count() < len(BLOOD_TYPES):
            cls.seed()
        return Inventory.objects.prefetch_related('expiring_batches').order_by('blood_type')

    @classmethod
    def get(cls, blood_type):
        cls.validate_blood_type(blood_type)
        inventory = Inventory.objects.filter(blood_type=blood_type).first()
        if inventory is None:
            cls.seed()
            inventory = Inventory.objects.get(blood_type=blood_type)
        return inventory

    @staticmethod
    def _record(inventory, transaction_type, quantity, reference_id=None, notes=''):
        return InventoryTransaction.objects.create(
            inventory=inventory,
            transaction_type=transaction_type,
            quantity=quantity,
            blood_type=inventory.blood_type,
            reference_id=reference_id,
            notes=notes or '',
        )

    @classmethod
    def credit(cls, blood_type, units, transaction_type='donation', reference_id=None, notes=''):
        """Add units to a blood type's stock."""
        if units < 1:
            raise InvalidInput("Units must be a positive number")
        inventory = cls.get(blood_type)

        with transaction.atomic():
            Inventory.objects.filter(pk=inventory.pk).update(
                units_available=F('units_available') + units,
                last_updated=timezone.now(),
            )
            inventory.refresh_from_db()
            cls._record(inventory, transaction_type, units, reference_id, notes)

        logger.info("Inventory %s +%d (%s) -> %d", blood_type, units, transaction_type, inventory.units_available)
        return inventory

    @classmethod
    def debit(cls, blood_type, units, transaction_type='request', reference_id=None, notes=''):
        """Remove units from stock, or raise InsufficientStock without touching it."""
        if units < 1:
            raise InvalidInput("Units must be a positive number")
        inventory = cls.get(blood_type)

        with transaction.atomic():
            updated = Inventory.objects.filter(pk=inventory.pk, units_available__gte=units).update(
                units_available=F('units_available') - units,
                last_updated=timezone.now(),
            )
            inventory.refresh_from_db()
            if not updated:
                logger.warning(
                    "Inventory %s debit of %d refused, %d available",
                    blood_type, units, inventory.units_available
                )
                raise InsufficientStock(
                    f"Insufficient {blood_type} inventory. Available: {inventory.units_available} units"
                )
            cls._record(inventory, transaction_type, -units, reference_id, notes)

        logger.info("Inventory %s -%d (%s) -> %d", blood_type, units, transaction_type, inventory.units_available)
        return inventory

    @classmethod
    def set_fields(cls, blood_type, **fields):
        """Overwrite any subset of the stock fields (admin adjustment)."""
        unknown = set(fields) - set(INVENTORY_FIELDS)
        if unknown:
            raise InvalidInput(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            if value is None or value < 0:
                raise InvalidInput(f"{name} must be a non-negative number")

        cls.get(blood_type)
        with transaction.atomic():
            inventory = Inventory.objects.select_for_update().get(blood_type=blood_type)
            delta = fields.get('units_available', inventory.units_available) - inventory.units_available
            for name, value in fields.items():
                setattr(inventory, name, value)
            inventory.last_updated = timezone.now()
            inventory.save()
            if delta:
                cls._record(inventory, 'adjustment', delta, notes='Manual stock adjustment')

        logger.info("Inventory %s updated: %s", blood_type, fields)
        return inventory

    @classmethod
    def add_units(cls, blood_type, units, expiry_date=None):
        """Restock; with an expiry date the units are also tracked as a batch."""
        with transaction.atomic():
            inventory = cls.credit(blood_type, units, transaction_type='restock')
            if expiry_date is not None:
                ExpiringBatch.objects.create(inventory=inventory, expiry_date=expiry_date, units=units)
        return inventory

    @classmethod
    def low_stock(cls):
        return cls.list_all().filter(units_available__lte=F('minimum_threshold'))

    @classmethod
    def expiring_within(cls, days=None, now=None):
        """Records holding a batch that expires in (now, now + days]."""
        if days is None:
            days = settings.BLOODBANK['EXPIRY_ALERT_DAYS']
        if now is None:
            now = timezone.now()
        horizon = now + timedelta(days=days)
        return cls.list_all().filter(
            expiring_batches__expiry_date__gt=now,
            expiring_batches__expiry_date__lte=horizon,
        ).distinct()


class DonationService:

    @classmethod
    def schedule(cls, donor, donation_date, location=None, notes='', now=None):
        if not donor.is_donor:
            raise Forbidden("Only donors can schedule donations")
        if not donor.blood_type:
            raise InvalidInput("Your profile has no blood type")
        if not donor.check_eligibility(now):
            raise IneligibleDonor(
                "You are not eligible to donate yet. Please wait at least 8 weeks since your "
                f"last donation (next eligible date: {donor.next_eligible_date:%Y-%m-%d})."
            )

        donation = Donation.objects.create(
            donor=donor,
            donation_date=donation_date,
            blood_type=donor.blood_type,
            location=location or {},
            notes=notes or '',
        )
        logger.info("Donation %s scheduled by %s for %s", donation.pk, donor.username, donation_date)
        return donation

    @classmethod
    def update_status(cls, donation_id, staff, status, notes=None, pre_screening=None,
                      post_donation=None, units_collected=None):
        with transaction.atomic():
            donation = _lock(Donation, donation_id, "Donation")
            previous = donation.status
            check_transition(DONATION_TRANSITIONS, previous, status, 'donation')

            donation.status = status
            donation.staff_member = staff
            if notes:
                donation.notes = notes
            if pre_screening is not None:
                donation.pre_screening = pre_screening
            if post_donation is not None:
                donation.post_donation = post_donation
            if status == 'completed' and units_collected is not None:
                donation.units_collected = units_collected
            donation.save()

            if status == 'completed':
                cls._apply_completion(donation)

        logger.info("Donation %s %s -> %s by %s", donation.pk, previous, status, staff.username)
        return donation

    @staticmethod
    def _apply_completion(donation):
        # pre_screening['eligible'] is advisory and not enforced here
        User.objects.filter(pk=donation.donor_id).update(
            last_donation=donation.donation_date,
            donation_count=F('donation_count') + 1,
            is_eligible=is_eligible(donation.donation_date),
        )
        InventoryService.credit(
            donation.blood_type,
            donation.units_collected,
            transaction_type='donation',
            reference_id=donation.pk,
        )


class BloodRequestService:

    @classmethod
    def create(cls, requester, **fields):
        fields.pop('status', None)
        blood_request = BloodRequest.objects.create(requester=requester, status='pending', **fields)
        logger.info(
            "Blood request %s created by %s: %d x %s (%s)",
            blood_request.pk, requester.username, blood_request.units_needed,
            blood_request.blood_type, blood_request.urgency
        )
        transaction.on_commit(lambda: notify_new_request(blood_request))
        return blood_request

    @classmethod
    def get_for_user(cls, request_id, user):
        try:
            blood_request = BloodRequest.objects.select_related('requester', 'approved_by').get(pk=request_id)
        except BloodRequest.DoesNotExist:
            raise NotFound("Request not found")
        if not user.is_admin and blood_request.requester_id != user.id:
            raise Forbidden("Access denied")
        return blood_request

    @classmethod
    def update_status(cls, request_id, admin, status, notes=None):
        with transaction.atomic():
            blood_request = _lock(BloodRequest, request_id, "Request")
            previous = blood_request.status
            check_transition(REQUEST_TRANSITIONS, previous, status, 'request')

            now = timezone.now()
            if status == 'approved':
                blood_request.approved_by = admin
                blood_request.approved_date = now
            elif status == 'fulfilled':
                # raises InsufficientStock and rolls the whole transition back
                InventoryService.debit(
                    blood_request.blood_type,
                    blood_request.units_needed,
                    transaction_type='request',
                    reference_id=blood_request.pk,
                )
                blood_request.fulfilled_date = now

            blood_request.status = status
            if notes:
                blood_request.notes = notes
            blood_request.save()

        logger.info("Blood request %s %s -> %s by %s", blood_request.pk, previous, status, admin.username)
        return blood_request

    @classmethod
    def delete(cls, request_id, user):
        blood_request = cls.get_for_user(request_id, user)
        if blood_request.status not in DELETABLE_REQUEST_STATUSES:
            raise InvalidState("Cannot delete request with current status")
        blood_request.delete()
        logger.info("Blood request %s deleted by %s", request_id, user.username)
