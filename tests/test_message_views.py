import pytest

from messaging.models import Message
from messaging.services import create_message

# The views reach the fanout engine through async_to_sync, which needs real commits
pytestmark = pytest.mark.django_db(transaction=True)


def test_posted_room_message_reaches_every_live_member(client, live_registry, connect, alice, bob, make_user, study_room):
    outsider = make_user('Eve')
    alice_socket = connect(live_registry, alice.pk)
    bob_socket = connect(live_registry, bob.pk)
    outsider_socket = connect(live_registry, outsider.pk, rooms=[study_room.pk])
    client.force_login(alice)

    resp = client.post('/api/messages', {'content': 'hello', 'roomId': study_room.pk}, content_type='application/json')

    assert resp.status_code == 201
    body = resp.json()
    assert body['roomId'] == study_room.pk
    assert body['status'] == 'sent'
    for socket in (alice_socket, bob_socket):
        [event] = socket.transport.events('new_message')
        assert event['data']['id'] == body['id']
    assert outsider_socket.transport.sent == []


def test_posted_direct_message_is_delivered_to_an_online_recipient(client, live_registry, connect, alice, bob):
    alice_socket = connect(live_registry, alice.pk)
    bob_socket = connect(live_registry, bob.pk)
    client.force_login(alice)

    resp = client.post(f'/api/chats/{bob.pk}/messages', {'content': 'lunch?'}, content_type='application/json')

    assert resp.status_code == 201
    body = resp.json()
    assert body['recipientId'] == bob.pk
    assert body['status'] == 'delivered'
    assert len(bob_socket.transport.events('new_message')) == 1
    [update] = alice_socket.transport.events('update_message_status')
    assert update['messageId'] == body['id']
    assert Message.objects.get(pk=body['id']).status == Message.DELIVERED


def test_posted_direct_message_to_offline_user_stays_sent(client, live_registry, alice, bob):
    client.force_login(alice)

    resp = client.post(f'/api/chats/{bob.pk}/messages', {'content': 'lunch?'}, content_type='application/json')

    assert resp.status_code == 201
    assert Message.objects.get(pk=resp.json()['id']).status == Message.SENT


def test_form_encoded_messages_are_accepted(client, live_registry, alice, study_room):
    client.force_login(alice)

    resp = client.post('/api/messages', {'content': 'from a form', 'roomId': study_room.pk})

    assert resp.status_code == 201
    assert resp.json()['content'] == 'from a form'


@pytest.mark.parametrize('payload, status', [
    ({'content': 'hi'}, 400),
    ({'content': '   ', 'recipientId': 1}, 400),
    ({'content': 'hi', 'roomId': 1, 'recipientId': 1}, 400),
])
def test_invalid_message_bodies_are_rejected(client, alice, payload, status):
    client.force_login(alice)

    resp = client.post('/api/messages', payload, content_type='application/json')

    assert resp.status_code == status
    assert Message.objects.count() == 0


def test_non_members_cannot_post_to_a_room(client, live_registry, connect, make_user, alice, study_room):
    outsider = make_user('Eve')
    alice_socket = connect(live_registry, alice.pk)
    client.force_login(outsider)

    resp = client.post('/api/messages', {'content': 'hi', 'roomId': study_room.pk}, content_type='application/json')

    assert resp.status_code == 403
    assert Message.objects.count() == 0
    assert alice_socket.transport.sent == []


def test_sender_id_must_match_the_session(client, alice, bob):
    client.force_login(alice)

    resp = client.post('/api/messages', {'content': 'hi', 'senderId': bob.pk, 'recipientId': alice.pk},
                       content_type='application/json')

    assert resp.status_code == 403


def test_unknown_room_and_recipient_give_404(client, alice):
    client.force_login(alice)

    assert client.post('/api/messages', {'content': 'hi', 'roomId': 999999}, content_type='application/json').status_code == 404
    assert client.post('/api/messages', {'content': 'hi', 'recipientId': 999999}, content_type='application/json').status_code == 404


def test_malformed_json_gives_400(client, alice):
    client.force_login(alice)

    resp = client.post('/api/messages', '{not json', content_type='application/json')

    assert resp.status_code == 400
    assert resp.json()['message'] == 'Request body is not valid JSON.'


def test_marking_read_twice_sends_one_receipt(client, live_registry, connect, alice, bob):
    alice_socket = connect(live_registry, alice.pk)
    message = create_message(alice.pk, content='did you read this?', recipient_id=bob.pk)
    client.force_login(bob)

    first = client.post(f'/api/messages/{message.pk}/read')
    second = client.post(f'/api/messages/{message.pk}/read')

    assert first.status_code == second.status_code == 200
    assert first.json()['changed'] is True
    assert second.json()['changed'] is False
    assert first.json()['message']['status'] == second.json()['message']['status'] == 'read'
    [receipt] = alice_socket.transport.events('message_read')
    assert receipt['messageId'] == message.pk
    assert receipt['readerId'] == bob.pk


def test_only_the_recipient_can_mark_a_direct_message_read(client, alice, bob):
    message = create_message(alice.pk, content='private', recipient_id=bob.pk)
    client.force_login(alice)

    resp = client.post(f'/api/messages/{message.pk}/read')

    assert resp.status_code == 403
    assert Message.objects.get(pk=message.pk).status == Message.SENT


def test_marking_a_whole_chat_read(client, live_registry, connect, alice, bob):
    alice_socket = connect(live_registry, alice.pk)
    ids = [create_message(alice.pk, content=text, recipient_id=bob.pk).pk for text in ('one', 'two')]
    # Bob's own message is not his to mark
    create_message(bob.pk, content='three', recipient_id=alice.pk)
    client.force_login(bob)

    resp = client.post(f'/api/chats/{alice.pk}/read')
    again = client.post(f'/api/chats/{alice.pk}/read')

    assert sorted(resp.json()['messageIds']) == sorted(ids)
    assert again.json()['messageIds'] == []
    [event] = alice_socket.transport.events('chat_messages_read')
    assert sorted(event['messageIds']) == sorted(ids)
    assert event['readerId'] == bob.pk
    assert Message.objects.filter(pk__in=ids, status=Message.READ).count() == 2


def test_room_history_is_members_only_and_oldest_first(client, make_user, alice, study_room):
    for text in ('first', 'second', 'third'):
        create_message(alice.pk, content=text, room_id=study_room.pk)
    client.force_login(alice)

    resp = client.get(f'/api/rooms/{study_room.pk}/messages?limit=2')

    assert resp.status_code == 200
    assert [m['content'] for m in resp.json()] == ['second', 'third']

    client.force_login(make_user('Eve'))
    assert client.get(f'/api/rooms/{study_room.pk}/messages').status_code == 403


def test_direct_history_and_chat_list(client, alice, bob):
    create_message(alice.pk, content='hey', recipient_id=bob.pk)
    create_message(alice.pk, content='you there?', recipient_id=bob.pk)
    client.force_login(bob)

    history = client.get(f'/api/chats/{alice.pk}/messages').json()
    chats = client.get('/api/chats').json()

    assert [m['content'] for m in history] == ['hey', 'you there?']
    assert len(chats) == 1
    assert chats[0]['partner']['id'] == alice.pk
    assert chats[0]['lastMessage']['content'] == 'you there?'
    assert chats[0]['unreadCount'] == 2


def test_anonymous_requests_are_sent_to_login(client, study_room):
    resp = client.get(f'/api/rooms/{study_room.pk}/messages')

    assert resp.status_code == 302
    assert resp['Location'].startswith('/api/auth/login')
