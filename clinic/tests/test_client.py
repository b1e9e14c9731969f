import json

import pytest
import requests

from clinic.client import ApiError, HmisClient, error_message


class FakeResponse:
    def __init__(self, status_code, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is not None:
            self.content = text.encode()
        else:
            self.content = json.dumps(body).encode() if body is not None else b''
        self.text = text if text is not None else self.content.decode()

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError('no json')
        return self._body


@pytest.fixture
def calls(monkeypatch):
    """Record outgoing requests and answer with queued FakeResponses."""
    state = {'sent': [], 'responses': []}

    def fake_request(self, method, url, params=None, json=None, headers=None, timeout=None):
        state['sent'].append({'method': method, 'url': url, 'params': params, 'json': json, 'headers': headers})
        return state['responses'].pop(0)

    monkeypatch.setattr(requests.Session, 'request', fake_request)
    return state


@pytest.mark.parametrize('body,expected', [
    ({'ok': False, 'error': {'code': 'invalid_transition', 'message': 'cannot move'}}, 'cannot move'),
    ({'error': 'Patient not found'}, 'Patient not found'),
    ({'message': 'Bad input'}, 'Bad input'),
    ({'msg': 'Nope'}, 'Nope'),
    ({'detail': 'Not authenticated'}, 'Not authenticated'),
    ({}, 'HTTP error! status: 418'),
    ('<html>oops</html>', 'HTTP error! status: 418'),
    (None, 'HTTP error! status: 418'),
])
def test_error_message(body, expected):
    assert error_message(418, body) == expected


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv('HMIS_API_URL', 'http://hmis.example:9000/')
    assert HmisClient().base_url == 'http://hmis.example:9000'
    monkeypatch.delenv('HMIS_API_URL')
    assert HmisClient().base_url == 'http://localhost:8000'


def test_login_stores_token_and_sends_it(calls):
    client = HmisClient(base_url='http://api')
    calls['responses'] += [
        FakeResponse(200, {'ok': True, 'token': 'abc123', 'jwt_access': 'a.b.c', 'jwt_refresh': 'r.e.f'}),
        FakeResponse(200, [{'patientId': 1}]),
    ]
    client.login('reception1', '123456')
    assert client.token == 'abc123'
    assert client.patients.search('doe') == [{'patientId': 1}]

    sent = calls['sent'][1]
    assert sent['method'] == 'GET'
    assert sent['url'] == 'http://api/api/patients'
    assert sent['params'] == {'search': 'doe'}
    assert sent['headers'] == {'Authorization': 'Token abc123'}


def test_jwt_is_sent_as_bearer(calls):
    client = HmisClient(base_url='http://api', token='x.y.z')
    calls['responses'].append(FakeResponse(200, {'total': 0}))
    client.queue.stats()
    assert calls['sent'][0]['headers'] == {'Authorization': 'Bearer x.y.z'}
    assert calls['sent'][0]['params'] == {}


def test_error_raises_api_error_with_status_and_body(calls):
    client = HmisClient(base_url='http://api', token='abc')
    body = {'ok': False, 'error': {'code': 'invalid_transition', 'message': 'cannot move from waiting to completed'}}
    calls['responses'].append(FakeResponse(400, body))
    with pytest.raises(ApiError) as exc:
        client.queue.set_status(7, 'completed')
    assert exc.value.status == 400
    assert exc.value.response == body
    assert str(exc.value) == 'cannot move from waiting to completed'
    assert calls['sent'][0]['url'] == 'http://api/api/queue/7/status'
    assert calls['sent'][0]['json'] == {'status': 'completed'}
    assert client.token == 'abc'


def test_unauthorized_clears_token(calls):
    client = HmisClient(base_url='http://api', token='abc')
    calls['responses'].append(FakeResponse(401, {'detail': 'Invalid token.'}))
    with pytest.raises(ApiError) as exc:
        client.inventory.list()
    assert exc.value.status == 401
    assert str(exc.value) == 'Invalid token.'
    assert client.token is None


def test_no_retry_on_server_error(calls):
    client = HmisClient(base_url='http://api')
    calls['responses'].append(FakeResponse(500, text='Internal Server Error'))
    with pytest.raises(ApiError) as exc:
        client.theme.contrast('#777777')
    assert exc.value.status == 500
    assert exc.value.response == 'Internal Server Error'
    assert len(calls['sent']) == 1


def test_resource_paths(calls):
    client = HmisClient(base_url='http://api')
    calls['responses'] += [FakeResponse(200, {}) for _ in range(6)]
    client.payables.pay(3, '250.00')
    client.receivables.stats()
    client.icu.beds.list()
    client.maternity.discharge(9)
    client.inventory.adjust(4, 'subtract', 2, 'use')
    client.ledger.transactions.delete(11)
    assert [(c['method'], c['url']) for c in calls['sent']] == [
        ('POST', 'http://api/api/payables/3/payment'),
        ('GET', 'http://api/api/receivables/stats/summary'),
        ('GET', 'http://api/api/icu/beds'),
        ('POST', 'http://api/api/maternity/admissions/9/discharge'),
        ('POST', 'http://api/api/inventory/transactions'),
        ('DELETE', 'http://api/api/ledger/transactions/11'),
    ]
    assert calls['sent'][4]['json'] == {'itemId': 4, 'adjustmentType': 'subtract', 'quantity': 2, 'reason': 'use'}
