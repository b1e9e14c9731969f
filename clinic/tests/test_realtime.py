import asyncio

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import Patient, User
from clinic.realtime.consumers import QueueConsumer
from clinic.services import queue as queue_service


def as_user(user):
    inner = QueueConsumer.as_asgi()

    async def app(scope, receive, send):
        return await inner(dict(scope, user=user), receive, send)

    return app


async def receive_one(layer, channel):
    return await asyncio.wait_for(layer.receive(channel), timeout=2)


@pytest.mark.django_db(transaction=True)
def test_status_change_is_published_to_queue_group():
    nurse = User.objects.create_user(username='nurse1', password='pass', role='nurse')
    patient = Patient.objects.create(patient_number='P-000001', first_name='Jane', last_name='Doe')
    entry = queue_service.enqueue(patient=patient, service_point='triage', user=nurse)

    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(queue_service.QUEUE_GROUP, channel)

    client = APIClient()
    client.force_authenticate(nurse)
    r = client.put(reverse('queue_status', args=[entry.id]), {'status': 'called'}, format='json')
    assert r.status_code == 200, r.data

    message = async_to_sync(receive_one)(layer, channel)
    assert message['type'] == 'queue.update'
    assert message['event'] == 'status'
    assert message['queueId'] == entry.id
    assert message['status'] == 'called'
    assert message['ticketNumber'] == 'T-001'


@pytest.mark.django_db
def test_consumer_forwards_queue_updates_to_signed_in_staff():
    nurse = User.objects.create_user(username='nurse2', password='pass', role='nurse')

    async def scenario():
        communicator = WebsocketCommunicator(as_user(nurse), '/ws/queue/')
        connected, _ = await communicator.connect()
        assert connected
        welcome = await communicator.receive_json_from()
        assert welcome['type'] == 'welcome'

        await get_channel_layer().group_send(queue_service.QUEUE_GROUP, {
            'type': 'queue.update', 'event': 'status', 'queueId': 7, 'status': 'serving',
        })
        update = await communicator.receive_json_from()
        await communicator.disconnect()
        return update

    update = async_to_sync(scenario)()
    assert update['queueId'] == 7
    assert update['status'] == 'serving'


@pytest.mark.django_db
def test_consumer_rejects_anonymous_connections():
    async def scenario():
        communicator = WebsocketCommunicator(as_user(AnonymousUser()), '/ws/queue/')
        connected, _ = await communicator.connect()
        await communicator.disconnect()
        return connected

    assert async_to_sync(scenario)() is False
