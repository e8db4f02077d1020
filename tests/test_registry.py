import pytest

from helpers import FakeTransport
from messaging.registry import Connection, ConnectionClosed, ConnectionRegistry


def _connection():
    return Connection(FakeTransport())


def test_register_then_unregister_forgets_the_user():
    registry = ConnectionRegistry()
    connection = _connection()

    registry.register(7, connection)
    assert registry.lookup_user(7) is connection
    assert connection.is_authenticated

    registry.unregister(connection)
    assert registry.lookup_user(7) is None
    assert connection.closed
    assert len(registry) == 0


def test_last_socket_wins_and_old_unregister_keeps_the_new_one():
    registry = ConnectionRegistry()
    first, second = _connection(), _connection()

    registry.register(7, first)
    registry.register(7, second)
    assert registry.lookup_user(7) is second
    # The replaced socket is not closed, only unreachable
    assert first.is_open

    registry.unregister(first)
    assert registry.lookup_user(7) is second


def test_register_is_idempotent_for_the_same_connection():
    registry = ConnectionRegistry()
    connection = _connection()

    registry.register(7, connection)
    registry.register(7, connection)

    assert registry.lookup_user(7) is connection
    assert registry.online_user_ids() == {7}


def test_join_requires_an_authenticated_connection():
    registry = ConnectionRegistry()
    anonymous = _connection()

    assert registry.join_room(3, anonymous) is False
    assert registry.lookup_room(3) == frozenset()
    assert anonymous.rooms == set()


def test_join_then_leave_removes_the_empty_room_entry():
    registry = ConnectionRegistry()
    connection = _connection()
    registry.register(7, connection)

    assert registry.join_room(3, connection) is True
    assert registry.lookup_room(3) == {connection}

    registry.leave_room(3, connection)
    assert connection not in registry.lookup_room(3)
    assert 3 not in registry._rooms
    assert connection.rooms == set()


def test_leave_keeps_room_entry_while_others_remain():
    registry = ConnectionRegistry()
    alice, bob = _connection(), _connection()
    registry.register(1, alice)
    registry.register(2, bob)
    registry.join_room(3, alice)
    registry.join_room(3, bob)

    registry.leave_room(3, alice)

    assert registry.lookup_room(3) == {bob}


def test_unregister_clears_every_joined_room_and_is_idempotent():
    registry = ConnectionRegistry()
    connection = _connection()
    registry.register(7, connection)
    registry.join_room(3, connection)
    registry.join_room(4, connection)

    registry.unregister(connection)
    registry.unregister(connection)

    assert registry.lookup_room(3) == frozenset()
    assert registry.lookup_room(4) == frozenset()
    assert registry._rooms == {}


def test_unregister_is_safe_on_an_anonymous_connection():
    registry = ConnectionRegistry()
    connection = _connection()

    registry.unregister(connection)

    assert connection.closed
    assert len(registry) == 0


def test_closed_connection_cannot_join_rooms():
    registry = ConnectionRegistry()
    connection = _connection()
    registry.register(7, connection)
    registry.unregister(connection)

    assert registry.join_room(3, connection) is False
    assert registry.lookup_room(3) == frozenset()


def test_lookup_room_returns_a_snapshot():
    registry = ConnectionRegistry()
    connection = _connection()
    registry.register(7, connection)
    registry.join_room(3, connection)

    snapshot = registry.lookup_room(3)
    registry.leave_room(3, connection)

    assert snapshot == {connection}


@pytest.mark.asyncio
async def test_send_event_on_a_closed_connection_raises():
    transport = FakeTransport()
    connection = Connection(transport)
    await connection.send_event({'type': 'typing'})
    connection.closed = True

    with pytest.raises(ConnectionClosed):
        await connection.send_event({'type': 'typing'})
    assert transport.sent == [{'type': 'typing'}]
