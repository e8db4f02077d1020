import asyncio
import json

from channels.testing import WebsocketCommunicator
from django.utils import timezone

from messaging.consumers import ChatConsumer
from messaging.fanout import FanoutEngine
from messaging.gateway import PersistenceGateway
from messaging.presence import PresenceChannel
from messaging.registry import ConnectionRegistry

PASSWORD = 'correct-horse-battery-42'


class FakeTransport:
    """Stands in for a consumer: records what would have gone down the socket."""

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, text_data=None, bytes_data=None):
        if self.fail:
            raise ConnectionResetError('socket went away')
        self.sent.append(json.loads(text_data))

    def events(self, event_type=None):
        return [e for e in self.sent if event_type is None or e['type'] == event_type]


class FakeGateway:
    """In-memory persistence for fanout and presence tests that don't need a database."""

    def __init__(self, room_members=None):
        self.room_members = room_members or {}
        self.delivered = []
        self.read_results = {}
        self.chat_read_results = {}

    async def get_room_member_ids(self, room_id):
        return list(self.room_members.get(room_id, ()))

    async def is_room_member(self, room_id, user_id):
        return user_id in self.room_members.get(room_id, ())

    async def mark_delivered(self, message_id):
        if message_id in self.delivered:
            return None
        self.delivered.append(message_id)
        return timezone.now()

    async def mark_message_read(self, message_id, reader_id):
        return self.read_results[message_id]

    async def mark_chat_read(self, partner_id, reader_id):
        return self.chat_read_results.get((partner_id, reader_id), [])


def message_dict(message_id=1, sender_id=1, room_id=None, recipient_id=None, status='sent', content='hello'):
    return {
        'id': message_id,
        'content': content,
        'senderId': sender_id,
        'roomId': room_id,
        'recipientId': recipient_id,
        'messageType': 'text',
        'fileId': None,
        'replyToId': None,
        'status': status,
        'createdAt': timezone.now(),
        'deliveredAt': None,
        'readAt': None,
    }


class Realtime:
    """A private registry, fanout engine and presence channel wired to a ChatConsumer."""

    def __init__(self, gateway=None, registry=None):
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.gateway = gateway or PersistenceGateway()
        self.fanout = FanoutEngine(self.registry, self.gateway)
        self.presence = PresenceChannel(self.registry, self.gateway, self.fanout)
        self.application = ChatConsumer.as_asgi(
            registry=self.registry,
            gateway=self.gateway,
            fanout=self.fanout,
            presence=self.presence,
        )

    async def open_socket(self, user=None):
        communicator = WebsocketCommunicator(self.application, '/ws/')
        connected, _ = await communicator.connect()
        assert connected
        if user is not None:
            await communicator.send_json_to({'type': 'authenticate', 'userId': user.pk})
            event = await next_event(communicator)
            assert event == {'type': 'authenticated', 'userId': user.pk}
        return communicator

    async def close(self, *communicators):
        for communicator in communicators:
            await communicator.disconnect()
        # Let any "mark offline" tasks finish inside the test's event loop
        tasks = list(self.presence.offline_tasks.values())
        if tasks:
            await asyncio.gather(*tasks)


async def next_event(communicator, timeout=2):
    # Presence broadcasts can interleave with anything; they are tested on their own
    while True:
        event = await communicator.receive_json_from(timeout=timeout)
        if event['type'] != 'presence_update':
            return event


async def drain(communicator, keep_presence=False):
    events = []
    while not await communicator.receive_nothing(timeout=0.2):
        event = await communicator.receive_json_from()
        if keep_presence or event['type'] != 'presence_update':
            events.append(event)
    return events
