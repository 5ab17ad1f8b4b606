from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from donations.models import Inventory, BloodRequest, Donation

User = get_user_model()


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture
def make_user(db):
    def _make_user(username, role='donor', blood_type='O+', **extra):
        return User.objects.create_user(
            username=username,
            email=f'{username}@example.com',
            password='s3cure-pass!',
            role=role,
            blood_type=blood_type,
            **extra
        )
    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user('admin', role='admin', blood_type=None)


@pytest.fixture
def donor(make_user):
    return make_user('donor', role='donor', blood_type='O+')


@pytest.fixture
def recipient(make_user):
    return make_user('recipient', role='recipient', blood_type='A+')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _client_for(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client_for


@pytest.fixture
def stock(db):
    """Set a blood type's stock directly, bypassing the ledger."""
    def _stock(blood_type, units, **fields):
        inventory, _ = Inventory.objects.update_or_create(
            blood_type=blood_type, defaults={'units_available': units, **fields}
        )
        return inventory
    return _stock


@pytest.fixture
def make_request(recipient):
    def _make_request(status='pending', blood_type='O+', units_needed=3, requester=None, **extra):
        return BloodRequest.objects.create(
            requester=requester or recipient,
            patient_name='Jane Roe',
            blood_type=blood_type,
            units_needed=units_needed,
            urgency='high',
            hospital_name='General Hospital',
            medical_reason='Surgery',
            required_date=timezone.now() + timedelta(days=2),
            status=status,
            **extra
        )
    return _make_request


@pytest.fixture
def make_donation(donor):
    def _make_donation(status='scheduled', donor_user=None, **extra):
        owner = donor_user or donor
        return Donation.objects.create(
            donor=owner,
            donation_date=extra.pop('donation_date', timezone.now()),
            blood_type=owner.blood_type,
            status=status,
            **extra
        )
    return _make_donation
