import itertools

import pytest
from django.apps import apps
from django.core.cache import cache

from helpers import PASSWORD, FakeTransport, Realtime
from messaging.registry import Connection
from rooms.models import Room, RoomMember


@pytest.fixture(autouse=True)
def _realtime_settings(settings):
    """Keep every test on in-process backends, whatever the local .env says."""

    settings.CHANNEL_LAYERS = {'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}}
    settings.CACHES = {'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'}}
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.REALTIME_OFFLINE_GRACE_SECONDS = 0
    settings.REALTIME_REQUIRE_SESSION = False
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(django_user_model):
    counter = itertools.count(1)

    def _make_user(first_name='Ada', **extra):
        n = next(counter)
        return django_user_model.objects.create_user(
            email=f'{first_name.lower()}{n}@example.edu',
            password=PASSWORD,
            first_name=first_name,
            last_name='Student',
            **extra,
        )

    return _make_user


@pytest.fixture
def make_room():
    def _make_room(creator, *members, name='Linear Algebra'):
        # The creator's membership is added by the post_save signal
        room = Room.objects.create(creator=creator, name=name)
        for member in members:
            RoomMember.objects.create(room=room, user=member, role=RoomMember.MEMBER)
        return room

    return _make_room


@pytest.fixture
def connect():
    """Register a fake socket for 'user_id' in 'registry' and return the Connection."""

    def _connect(registry, user_id, fail=False, rooms=()):
        connection = Connection(FakeTransport(fail=fail))
        registry.register(user_id, connection)
        for room_id in rooms:
            registry.join_room(room_id, connection)
        return connection

    return _connect


@pytest.fixture
def realtime():
    return Realtime()


@pytest.fixture
def alice(make_user):
    return make_user('Alice')


@pytest.fixture
def bob(make_user):
    return make_user('Bob')


@pytest.fixture
def study_room(make_room, alice, bob):
    return make_room(alice, bob)


@pytest.fixture
def live_registry():
    """The registry the HTTP views fan out through; emptied again after the test."""

    registry = apps.get_app_config('messaging').registry
    yield registry
    for user_id in list(registry.online_user_ids()):
        registry.unregister(registry.lookup_user(user_id))
