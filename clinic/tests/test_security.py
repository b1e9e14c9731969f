import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, User
from clinic.views.auth import LoginRateThrottle

pytestmark = pytest.mark.django_db


def login(client, username, password):
    r = client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')
    assert r.status_code in (200, 400, 401)
    return r


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', role='doctor')
    r = login(client, 'u_jwt', 'P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['ok'] is True
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == 'doctor'
    assert r.data['user']['username'] == 'u_jwt'


def test_bad_password_is_401_and_audited():
    client = APIClient()
    User.objects.create_user(username='u1', password='P@ssw0rd1', role='nurse')
    r = login(client, 'u1', 'wrong')
    assert r.status_code == 401
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'invalid_credentials'
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_repeated_failed_logins_are_throttled():
    client = APIClient()
    User.objects.create_user(username='u_slow', password='P@ssw0rd1', role='nurse')
    allowed = LoginRateThrottle().num_requests
    codes = [login(client, 'u_slow', 'wrong').status_code for _ in range(allowed)]
    assert codes == [401] * allowed
    r = client.post(reverse('login_view'), {'username': 'u_slow', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 429
    assert r.data['ok'] is False


def test_missing_credentials_is_400():
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'nobody'}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_no_role_bypass_in_login():
    client = APIClient()
    u = User.objects.create_user(username='u2', password='P@ssw0rd1', role='registration')
    r = client.post(reverse('login_view'), {'username': 'u2', 'password': 'P@ssw0rd1', 'role': 'admin'},
                    format='json')
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.role == 'registration'
    assert r.data['role'] == 'registration'


def test_token_and_bearer_both_authenticate():
    client = APIClient()
    User.objects.create_user(username='u3', password='P@ssw0rd1', role='billing')
    data = login(client, 'u3', 'P@ssw0rd1').data

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get(reverse('me_view')).data['username'] == 'u3'

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert client.get(reverse('me_view')).data['role'] == 'billing'


def test_refresh_returns_new_access_token():
    client = APIClient()
    User.objects.create_user(username='u4', password='P@ssw0rd1', role='nurse')
    data = login(client, 'u4', 'P@ssw0rd1').data
    r = client.post(reverse('jwt_refresh_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']


def test_logout_drops_drf_token():
    client = APIClient()
    User.objects.create_user(username='u5', password='P@ssw0rd1', role='nurse')
    data = login(client, 'u5', 'P@ssw0rd1').data
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    r = client.post(reverse('logout_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1
    assert client.get(reverse('me_view')).status_code in (401, 403)


def test_healthz_is_public():
    r = APIClient().get(reverse('healthz'))
    assert r.status_code == 200


def test_anonymous_requests_are_rejected():
    client = APIClient()
    for name in ('patients', 'queue', 'inventory', 'payables', 'ledger_accounts'):
        assert client.get(reverse(name)).status_code in (401, 403), name


@pytest.mark.parametrize('role,name,expected', [
    ('nurse', 'payables', 403),
    ('pharmacy', 'ledger_accounts', 403),
    ('billing', 'payables', 200),
    ('admin', 'ledger_accounts', 200),
    ('doctor', 'inventory', 200),
])
def test_role_permissions_on_reads(role, name, expected):
    client = APIClient()
    client.force_authenticate(User.objects.create_user(username=f'{role}_x', password='x', role=role))
    assert client.get(reverse(name)).status_code == expected


def test_only_inventory_roles_may_write_items():
    client = APIClient()
    client.force_authenticate(User.objects.create_user(username='doc', password='x', role='doctor'))
    r = client.post(reverse('inventory'), {'name': 'Gauze'}, format='json')
    assert r.status_code == 403
    assert r.data['ok'] is False

    client.force_authenticate(User.objects.create_user(username='pharm', password='x', role='pharmacy'))
    r = client.post(reverse('inventory'), {'name': 'Gauze'}, format='json')
    assert r.status_code == 201


def test_only_front_desk_registers_patients():
    client = APIClient()
    client.force_authenticate(User.objects.create_user(username='lab', password='x', role='lab_technician'))
    r = client.post(reverse('patients'), {'firstName': 'A', 'lastName': 'B'}, format='json')
    assert r.status_code == 403
