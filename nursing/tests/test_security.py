import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from nursing.models import AuditEvent, Nurse

pytestmark = pytest.mark.django_db

PASSWORD = 'Ward@2024pass'


def login(client, email, password):
    return client.post(reverse('nurse_login'), {'email': email, 'password': password}, format='json')


def test_signup_hashes_password_and_assigns_nurse_id():
    client = APIClient()
    r = client.post(reverse('nurse_signup'), {
        'name': 'Lata Nair', 'email': 'Lata@Ward.test', 'password': PASSWORD,
        'role': 'Staff Nurse', 'department': 'Cardiology',
    }, format='json')
    assert r.status_code == 201
    assert r.data['nurse']['nurseId'] == 'N0001'
    assert r.data['nurse']['status'] == 'Active'
    assert 'password' not in r.data['nurse']

    nurse = Nurse.objects.get(email='lata@ward.test')
    assert nurse.password != PASSWORD
    assert nurse.check_password(PASSWORD)

    dup = client.post(reverse('nurse_signup'), {
        'name': 'Again', 'email': 'lata@ward.test', 'password': PASSWORD, 'department': 'Cardiology',
    }, format='json')
    assert dup.status_code == 400


def test_signup_rejects_unknown_department():
    r = APIClient().post(reverse('nurse_signup'), {
        'name': 'X', 'email': 'x@ward.test', 'password': PASSWORD, 'department': 'Dermatology',
    }, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'


def test_login_returns_jwt_with_id_and_role(nurse):
    r = login(APIClient(), 'staff@ward.test', PASSWORD)
    assert r.status_code == 200
    assert r.data['nurse']['nurseId'] == nurse.nurse_id
    token = AccessToken(r.data['token'])
    assert str(token['id']) == str(nurse.id)
    assert token['role'] == 'Staff Nurse'
    assert r.data['refresh']
    assert AuditEvent.objects.filter(action='login', nurse=nurse, detail__result='ok').exists()


def test_login_with_wrong_password(nurse):
    r = login(APIClient(), 'staff@ward.test', 'nope-nope')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Invalid credentials'
    assert 'token' not in r.data


def test_inactive_nurse_login_gets_403_with_summary(nurse):
    nurse.status = Nurse.STATUS_INACTIVE
    nurse.save()
    r = login(APIClient(), 'staff@ward.test', PASSWORD)
    assert r.status_code == 403
    assert r.data['nurse']['status'] == 'Inactive'
    assert 'token' not in r.data


def test_inactive_nurse_token_is_rejected_with_403(nurse, api):
    assert api.get(reverse('patient_list')).status_code == 200
    Nurse.objects.filter(pk=nurse.pk).update(status=Nurse.STATUS_INACTIVE)
    r = api.get(reverse('patient_list'))
    assert r.status_code == 403
    assert r.data['ok'] is False


def test_endpoints_require_a_token():
    client = APIClient()
    assert client.get(reverse('patient_list')).status_code == 401
    assert client.get(reverse('prescription_list')).status_code == 401
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    assert client.get(reverse('patient_list')).status_code == 401


def test_refresh_and_logout(nurse):
    client = APIClient()
    tokens = login(client, 'staff@ward.test', PASSWORD).data
    r = client.post(reverse('nurse_refresh'), {'refresh': tokens['refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['token']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['token']}")
    r = client.post(reverse('nurse_logout'), {'refresh': tokens['refresh']}, format='json')
    assert r.data == {'ok': True, 'blacklisted': 1}
    r = client.post(reverse('nurse_refresh'), {'refresh': tokens['refresh']}, format='json')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_refresh_with_malformed_token_is_401():
    r = APIClient().post(reverse('nurse_refresh'), {'refresh': 'not-a-refresh-token'}, format='json')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'token_not_valid'


def test_status_change_needs_head_nurse(nurse, head_nurse, api, head_api):
    r = api.patch(reverse('nurse_status', args=[head_nurse.pk]), {'status': 'inactive'}, format='json')
    assert r.status_code == 403

    r = head_api.patch(reverse('nurse_status', args=[nurse.pk]), {'status': 'INACTIVE'}, format='json')
    assert r.status_code == 200
    assert r.data['nurse']['status'] == 'Inactive'
    nurse.refresh_from_db()
    assert not nurse.is_active

    r = head_api.patch(reverse('nurse_status', args=[nurse.pk]), {'status': 'sleeping'}, format='json')
    assert r.status_code == 400
    r = head_api.patch(reverse('nurse_status', args=[9999]), {'status': 'active'}, format='json')
    assert r.status_code == 404


def test_healthz_is_public():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}
