from rest_framework import serializers
from rest_framework.settings import ISO_8601

from accounts.models import BLOOD_TYPE_CHOICES
from .models import Inventory, ExpiringBatch, Donation, BloodRequest, InventoryTransaction

# Accept plain dates as well as full timestamps
DATETIME_INPUT_FORMATS = [ISO_8601, '%Y-%m-%d']


class ExpiringBatchSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpiringBatch
        fields = ['expiry_date', 'units']


class InventorySerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)
    available_for_allocation = serializers.IntegerField(read_only=True)
    expiring_batches = ExpiringBatchSerializer(many=True, read_only=True)

    class Meta:
        model = Inventory
        fields = ['blood_type', 'units_available', 'reserved_units', 'available_for_allocation',
                  'minimum_threshold', 'max_capacity', 'is_low_stock', 'expiring_batches',
                  'last_updated']
        read_only_fields = fields


class InventoryUpdateSerializer(serializers.Serializer):
    units_available = serializers.IntegerField(min_value=0, required=False)
    reserved_units = serializers.IntegerField(min_value=0, required=False)
    minimum_threshold = serializers.IntegerField(min_value=0, required=False)
    max_capacity = serializers.IntegerField(min_value=0, required=False)

    def validate(self, data):
        if not data:
            raise serializers.ValidationError("Provide at least one field to update")
        return data


class AddUnitsSerializer(serializers.Serializer):
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPE_CHOICES)
    units = serializers.IntegerField(min_value=1)
    expiry_date = serializers.DateTimeField(required=False, allow_null=True,
                                            input_formats=DATETIME_INPUT_FORMATS)


class InventoryAlertsQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=3650, required=False)


class InventoryTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryTransaction
        fields = ['id', 'transaction_type', 'quantity', 'blood_type',
                  'reference_id', 'timestamp', 'notes']
        read_only_fields = fields


# Nested documents stored in JSON columns

class LocationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    address = serializers.CharField(max_length=300, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PreScreeningSerializer(serializers.Serializer):
    weight = serializers.FloatField(min_value=0, required=False)
    blood_pressure = serializers.CharField(max_length=20, required=False, allow_blank=True)
    pulse = serializers.IntegerField(min_value=0, required=False)
    temperature = serializers.FloatField(required=False)
    hemoglobin = serializers.FloatField(min_value=0, required=False)
    eligible = serializers.BooleanField(required=False)


class PostDonationSerializer(serializers.Serializer):
    complications = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=200, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ContactPersonSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class DonationSerializer(serializers.ModelSerializer):
    donor_name = serializers.CharField(source='donor.get_full_name', read_only=True)
    staff_member_name = serializers.CharField(source='staff_member.username', read_only=True)

    class Meta:
        model = Donation
        fields = ['id', 'donor', 'donor_name', 'donation_date', 'blood_type', 'units_collected',
                  'status', 'location', 'pre_screening', 'post_donation', 'staff_member',
                  'staff_member_name', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields


class DonationCreateSerializer(serializers.Serializer):
    """Donor input; blood type and status are never taken from the caller."""
    donation_date = serializers.DateTimeField(input_formats=DATETIME_INPUT_FORMATS)
    location = LocationSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class DonationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Donation.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)
    pre_screening = PreScreeningSerializer(required=False)
    post_donation = PostDonationSerializer(required=False)
    units_collected = serializers.IntegerField(min_value=1, max_value=2, required=False)


class BloodRequestSerializer(serializers.ModelSerializer):
    requester_name = serializers.CharField(source='requester.get_full_name', read_only=True)
    approved_by_name = serializers.CharField(source='approved_by.username', read_only=True)

    class Meta:
        model = BloodRequest
        fields = ['id', 'requester', 'requester_name', 'patient_name', 'blood_type', 'units_needed',
                  'urgency', 'hospital_name', 'hospital_address', 'contact_person',
                  'medical_reason', 'required_date', 'status', 'approved_by', 'approved_by_name',
                  'approved_date', 'fulfilled_date', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields


class BloodRequestCreateSerializer(serializers.Serializer):
    patient_name = serializers.CharField(max_length=120)
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPE_CHOICES)
    units_needed = serializers.IntegerField(min_value=1, max_value=10)
    urgency = serializers.ChoiceField(choices=BloodRequest.URGENCY_CHOICES, default='medium')
    hospital_name = serializers.CharField(max_length=200)
    hospital_address = AddressSerializer(required=False)
    contact_person = ContactPersonSerializer(required=False)
    medical_reason = serializers.CharField()
    required_date = serializers.DateTimeField(input_formats=DATETIME_INPUT_FORMATS)
    notes = serializers.CharField(required=False, allow_blank=True)


class BloodRequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BloodRequest.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)
