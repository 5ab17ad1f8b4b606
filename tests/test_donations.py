from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from accounts.exceptions import Forbidden, IneligibleDonor, InvalidInput, InvalidState, NotFound
from donations.models import Donation, Inventory, InventoryTransaction
from donations.services import DonationService

pytestmark = pytest.mark.django_db


def test_schedule_copies_blood_type_from_donor(donor):
    donation = DonationService.schedule(donor, timezone.now() + timedelta(days=1),
                                        location={'name': 'City Center'})

    assert donation.status == 'scheduled'
    assert donation.blood_type == 'O+'
    assert donation.units_collected == 1
    assert donation.location == {'name': 'City Center'}


def test_schedule_rejects_recent_donor(make_user):
    recent = make_user('recent', last_donation=timezone.now() - timedelta(days=10))

    with pytest.raises(IneligibleDonor) as excinfo:
        DonationService.schedule(recent, timezone.now())

    assert (recent.last_donation + timedelta(days=56)).strftime('%Y-%m-%d') in str(excinfo.value.detail)
    assert not Donation.objects.filter(donor=recent).exists()


def test_schedule_accepts_donor_at_interval(make_user):
    returning = make_user('returning', last_donation=timezone.now() - timedelta(days=56))
    assert DonationService.schedule(returning, timezone.now()).status == 'scheduled'


def test_schedule_requires_donor_role(recipient):
    with pytest.raises(Forbidden):
        DonationService.schedule(recipient, timezone.now())


def test_schedule_requires_blood_type(make_user):
    unknown = make_user('unknown', blood_type=None)
    with pytest.raises(InvalidInput):
        DonationService.schedule(unknown, timezone.now())


def test_complete_credits_inventory_and_updates_donor(donor, admin_user, make_donation, stock):
    stock('O+', 4)
    donation = make_donation()

    DonationService.update_status(donation.pk, admin_user, 'completed', units_collected=2,
                                  pre_screening={'hemoglobin': 13.5, 'eligible': True})

    donation.refresh_from_db()
    donor.refresh_from_db()
    assert donation.status == 'completed'
    assert donation.staff_member == admin_user
    assert donation.pre_screening['hemoglobin'] == 13.5
    assert Inventory.objects.get(blood_type='O+').units_available == 6
    assert donor.donation_count == 1
    assert donor.last_donation == donation.donation_date
    assert donor.is_eligible is False

    entry = InventoryTransaction.objects.get(blood_type='O+')
    assert (entry.transaction_type, entry.quantity, entry.reference_id) == ('donation', 2, donation.pk)


def test_completed_donor_cannot_schedule_again(donor, admin_user, make_donation):
    donation = make_donation()
    DonationService.update_status(donation.pk, admin_user, 'completed')
    donor.refresh_from_db()

    with pytest.raises(IneligibleDonor):
        DonationService.schedule(donor, timezone.now())


@pytest.mark.parametrize('target', ['cancelled', 'rejected'])
def test_cancel_or_reject_has_no_side_effects(donor, admin_user, make_donation, stock, target):
    stock('O+', 4)
    donation = make_donation()

    DonationService.update_status(donation.pk, admin_user, target, notes='Donor unwell')

    donation.refresh_from_db()
    donor.refresh_from_db()
    assert donation.status == target
    assert donation.notes == 'Donor unwell'
    assert Inventory.objects.get(blood_type='O+').units_available == 4
    assert donor.donation_count == 0
    assert donor.last_donation is None
    assert not InventoryTransaction.objects.exists()


def test_terminal_donation_cannot_transition(admin_user, make_donation, stock):
    stock('O+', 0)
    donation = make_donation()
    DonationService.update_status(donation.pk, admin_user, 'completed')

    with pytest.raises(InvalidState):
        DonationService.update_status(donation.pk, admin_user, 'completed')

    assert Inventory.objects.get(blood_type='O+').units_available == 1


def test_update_status_unknown_donation(admin_user):
    with pytest.raises(NotFound):
        DonationService.update_status(999, admin_user, 'completed')


def test_update_status_unknown_target(admin_user, make_donation):
    with pytest.raises(InvalidInput):
        DonationService.update_status(make_donation().pk, admin_user, 'lost')


# HTTP

def test_donate_endpoint_schedules(client_for, donor):
    response = client_for(donor).post(
        reverse('donation-create'),
        {'donation_date': '2030-05-01', 'location': {'name': 'Mobile unit'}, 'blood_type': 'AB-'},
        format='json'
    )

    assert response.status_code == 201
    body = response.json()
    assert body['status'] == 'success'
    assert body['data']['blood_type'] == 'O+'
    assert body['data']['status'] == 'scheduled'


def test_donate_endpoint_reports_ineligible(client_for, make_user):
    recent = make_user('recent', last_donation=timezone.now() - timedelta(days=10))
    response = client_for(recent).post(reverse('donation-create'), {'donation_date': '2030-05-01'},
                                       format='json')

    assert response.status_code == 400
    assert response.json()['status'] == 'error'
    assert response.json()['code'] == 'ineligible_donor'


def test_donate_endpoint_is_donor_only(client_for, recipient):
    response = client_for(recipient).post(reverse('donation-create'), {'donation_date': '2030-05-01'},
                                          format='json')
    assert response.status_code == 403
    assert response.json()['code'] == 'forbidden'


def test_status_endpoint_is_admin_only(client_for, donor, make_donation):
    donation = make_donation()
    response = client_for(donor).patch(reverse('donation-status', args=[donation.pk]),
                                       {'status': 'completed'}, format='json')

    assert response.status_code == 403
    donation.refresh_from_db()
    assert donation.status == 'scheduled'


def test_status_endpoint_repeat_transition_conflicts(client_for, admin_user, make_donation):
    donation = make_donation()
    client = client_for(admin_user)
    url = reverse('donation-status', args=[donation.pk])

    first = client.patch(url, {'status': 'completed', 'units_collected': 1}, format='json')
    second = client.patch(url, {'status': 'completed'}, format='json')

    assert first.status_code == 200
    assert first.json()['message'] == 'Donation completed successfully'
    assert second.status_code == 409
    assert second.json()['code'] == 'invalid_state'


def test_my_donations_lists_only_own(client_for, donor, make_user, make_donation):
    other = make_user('other')
    make_donation()
    make_donation(donor_user=other)

    response = client_for(donor).get(reverse('donation-mine'))

    assert [d['donor'] for d in response.json()['data']] == [donor.pk]


def test_donation_detail_hidden_from_other_donors(client_for, make_user, make_donation):
    donation = make_donation()
    other = make_user('other')

    response = client_for(other).get(reverse('donation-detail', args=[donation.pk]))

    assert response.status_code == 404
    assert response.json()['code'] == 'not_found'


def test_all_donations_filters_and_paginates(client_for, admin_user, make_donation):
    for _ in range(3):
        make_donation()
    make_donation(status='cancelled')

    response = client_for(admin_user).get(reverse('donation-list'),
                                          {'status': 'scheduled', 'limit': 2, 'page': 2})

    data = response.json()['data']
    assert response.status_code == 200
    assert len(data['results']) == 1
    assert data['pagination'] == {'current': 2, 'pages': 2, 'total': 3}
