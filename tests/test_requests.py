from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from accounts.exceptions import Forbidden, InsufficientStock, InvalidState, NotFound
from donations.models import BloodRequest, Inventory, InventoryTransaction
from donations.services import BloodRequestService

pytestmark = pytest.mark.django_db


def request_payload(**overrides):
    payload = {
        'patient_name': 'John Doe',
        'blood_type': 'B+',
        'units_needed': 2,
        'urgency': 'critical',
        'hospital_name': 'St. Mary',
        'hospital_address': {'city': 'Springfield'},
        'contact_person': {'name': 'Dr. Who', 'phone': '555-0100'},
        'medical_reason': 'Trauma',
        'required_date': (timezone.now() + timedelta(days=1)).isoformat(),
    }
    payload.update(overrides)
    return payload


def test_create_is_always_pending(recipient, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks():
        blood_request = BloodRequestService.create(
            recipient, patient_name='P', blood_type='A-', units_needed=1, hospital_name='H',
            medical_reason='Anemia', required_date=timezone.now(), status='fulfilled'
        )

    assert blood_request.status == 'pending'
    assert blood_request.urgency == 'medium'
    assert blood_request.approved_by is None


def test_create_notifies_admins(recipient, admin_user, mailoutbox, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        BloodRequestService.create(
            recipient, patient_name='P', blood_type='AB+', units_needed=4, urgency='high',
            hospital_name='H', medical_reason='Surgery', required_date=timezone.now()
        )

    assert len(mailoutbox) == 1
    assert mailoutbox[0].subject == 'New Blood Request - AB+ (high priority)'
    assert mailoutbox[0].to == ['admin@example.com']
    assert 'Units needed: 4' in mailoutbox[0].body


def test_configured_recipients_take_precedence(settings, recipient, admin_user, mailoutbox,
                                               django_capture_on_commit_callbacks):
    settings.ADMIN_NOTIFICATION_EMAILS = ['ops@example.com']
    with django_capture_on_commit_callbacks(execute=True):
        BloodRequestService.create(
            recipient, patient_name='P', blood_type='O-', units_needed=1,
            hospital_name='H', medical_reason='Surgery', required_date=timezone.now()
        )

    assert mailoutbox[0].to == ['ops@example.com']


def test_mail_failure_does_not_block_creation(monkeypatch, client_for, recipient, admin_user,
                                              django_capture_on_commit_callbacks):
    def broken_send_mail(*args, **kwargs):
        raise ConnectionRefusedError('smtp down')

    monkeypatch.setattr('donations.notifications.send_mail', broken_send_mail)

    with django_capture_on_commit_callbacks(execute=True):
        response = client_for(recipient).post(reverse('request-create'), request_payload(), format='json')

    assert response.status_code == 201
    assert BloodRequest.objects.get(pk=response.json()['data']['id']).status == 'pending'


def test_approve_records_approver(admin_user, make_request):
    blood_request = make_request()

    BloodRequestService.update_status(blood_request.pk, admin_user, 'approved', notes='OK')

    blood_request.refresh_from_db()
    assert blood_request.status == 'approved'
    assert blood_request.approved_by == admin_user
    assert blood_request.approved_date is not None
    assert blood_request.notes == 'OK'


def test_fulfil_debits_inventory(admin_user, make_request, stock):
    stock('O+', 10)
    blood_request = make_request(status='approved', units_needed=3)

    BloodRequestService.update_status(blood_request.pk, admin_user, 'fulfilled')

    blood_request.refresh_from_db()
    assert blood_request.status == 'fulfilled'
    assert blood_request.fulfilled_date is not None
    assert Inventory.objects.get(blood_type='O+').units_available == 7
    entry = InventoryTransaction.objects.get(blood_type='O+')
    assert (entry.transaction_type, entry.quantity, entry.reference_id) == ('request', -3, blood_request.pk)


def test_fulfil_without_stock_leaves_everything_unchanged(admin_user, make_request, stock):
    stock('O+', 2)
    blood_request = make_request(status='approved', units_needed=3)

    with pytest.raises(InsufficientStock):
        BloodRequestService.update_status(blood_request.pk, admin_user, 'fulfilled')

    blood_request.refresh_from_db()
    assert blood_request.status == 'approved'
    assert blood_request.fulfilled_date is None
    assert Inventory.objects.get(blood_type='O+').units_available == 2
    assert not InventoryTransaction.objects.exists()


def test_pending_cannot_skip_to_fulfilled(admin_user, make_request, stock):
    stock('O+', 10)
    blood_request = make_request()

    with pytest.raises(InvalidState):
        BloodRequestService.update_status(blood_request.pk, admin_user, 'fulfilled')

    assert Inventory.objects.get(blood_type='O+').units_available == 10


@pytest.mark.parametrize('status', ['fulfilled', 'cancelled', 'expired'])
def test_terminal_request_cannot_transition(admin_user, make_request, status):
    blood_request = make_request(status=status)
    with pytest.raises(InvalidState):
        BloodRequestService.update_status(blood_request.pk, admin_user, 'approved')


def test_empty_notes_keep_existing(admin_user, make_request):
    blood_request = make_request(notes='Keep me')
    BloodRequestService.update_status(blood_request.pk, admin_user, 'approved', notes='')

    blood_request.refresh_from_db()
    assert blood_request.notes == 'Keep me'


@pytest.mark.parametrize('status', ['pending', 'cancelled'])
def test_owner_can_delete_open_request(recipient, make_request, status):
    blood_request = make_request(status=status)
    BloodRequestService.delete(blood_request.pk, recipient)
    assert not BloodRequest.objects.filter(pk=blood_request.pk).exists()


@pytest.mark.parametrize('status', ['approved', 'fulfilled', 'expired'])
def test_processed_request_cannot_be_deleted(admin_user, make_request, status):
    blood_request = make_request(status=status)
    with pytest.raises(InvalidState):
        BloodRequestService.delete(blood_request.pk, admin_user)
    assert BloodRequest.objects.filter(pk=blood_request.pk).exists()


def test_non_owner_cannot_delete(make_user, make_request):
    blood_request = make_request()
    stranger = make_user('stranger', role='recipient')

    with pytest.raises(Forbidden):
        BloodRequestService.delete(blood_request.pk, stranger)


def test_missing_request_is_not_found(admin_user):
    with pytest.raises(NotFound):
        BloodRequestService.get_for_user(12345, admin_user)


# HTTP

def test_create_endpoint_is_recipient_only(client_for, donor):
    response = client_for(donor).post(reverse('request-create'), request_payload(), format='json')
    assert response.status_code == 403


def test_create_endpoint_validates_units(client_for, recipient):
    response = client_for(recipient).post(reverse('request-create'), request_payload(units_needed=11),
                                          format='json')

    body = response.json()
    assert response.status_code == 400
    assert body['code'] == 'invalid_input'
    assert 'units_needed' in body['errors']


def test_create_endpoint_returns_pending_request(client_for, recipient, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks():
        response = client_for(recipient).post(reverse('request-create'), request_payload(), format='json')

    data = response.json()['data']
    assert response.status_code == 201
    assert data['status'] == 'pending'
    assert data['requester'] == recipient.pk
    assert data['hospital_address'] == {'city': 'Springfield'}


def test_detail_visible_to_owner_and_admin_only(client_for, recipient, admin_user, make_user, make_request):
    blood_request = make_request()
    url = reverse('request-detail', args=[blood_request.pk])

    assert client_for(recipient).get(url).status_code == 200
    assert client_for(admin_user).get(url).status_code == 200
    stranger = make_user('stranger', role='recipient')
    assert client_for(stranger).get(url).status_code == 403


def test_delete_endpoint(client_for, recipient, make_request):
    pending = make_request()
    approved = make_request(status='approved')
    client = client_for(recipient)

    ok = client.delete(reverse('request-detail', args=[pending.pk]))
    conflict = client.delete(reverse('request-detail', args=[approved.pk]))

    assert ok.status_code == 200
    assert ok.json() == {'status': 'success', 'message': 'Request deleted successfully'}
    assert conflict.status_code == 409
    assert conflict.json()['code'] == 'invalid_state'


def test_status_endpoint_insufficient_stock(client_for, admin_user, make_request, stock):
    stock('O+', 1)
    blood_request = make_request(status='approved', units_needed=3)

    response = client_for(admin_user).patch(reverse('request-status', args=[blood_request.pk]),
                                            {'status': 'fulfilled'}, format='json')

    assert response.status_code == 409
    assert response.json()['code'] == 'insufficient_stock'
    assert 'Available: 1 units' in response.json()['message']
    blood_request.refresh_from_db()
    assert blood_request.status == 'approved'


def test_status_endpoint_approves(client_for, admin_user, make_request):
    blood_request = make_request()
    response = client_for(admin_user).patch(reverse('request-status', args=[blood_request.pk]),
                                            {'status': 'approved'}, format='json')

    assert response.json()['message'] == 'Request approved successfully'
    assert response.json()['data']['approved_by'] == admin_user.pk


def test_my_requests_lists_only_own(client_for, recipient, make_user, make_request):
    other = make_user('other', role='recipient')
    mine = make_request()
    make_request(requester=other)

    response = client_for(recipient).get(reverse('request-mine'))

    assert [r['id'] for r in response.json()['data']] == [mine.pk]


def test_all_requests_filters(client_for, admin_user, make_request):
    make_request(blood_type='A+')
    make_request(blood_type='A+', status='approved')
    make_request(blood_type='B-')

    response = client_for(admin_user).get(reverse('request-list'), {'blood_type': 'A+', 'status': 'pending'})

    data = response.json()['data']
    assert data['pagination']['total'] == 1
    assert data['results'][0]['blood_type'] == 'A+'
    assert data['results'][0]['status'] == 'pending'


def test_all_requests_is_admin_only(client_for, recipient):
    assert client_for(recipient).get(reverse('request-list')).status_code == 403
