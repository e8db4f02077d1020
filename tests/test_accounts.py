import pytest
from django.core.exceptions import ValidationError
from django.test import Client

from accounts import services
from accounts.models import Friendship, Status
from core.utils import set_user_online
from helpers import PASSWORD

pytestmark = pytest.mark.django_db(transaction=True)


def test_register_logs_in_and_returns_the_user(client):
    resp = client.post('/api/auth/register', {
        'email': 'Grace@Example.edu', 'first_name': 'Grace', 'last_name': 'Hopper',
        'password1': PASSWORD, 'password2': PASSWORD,
    }, content_type='application/json')

    assert resp.status_code == 201
    assert resp.json()['email'] == 'grace@example.edu'
    assert resp.json()['username'] is None
    assert client.get('/api/auth/user').json()['firstName'] == 'Grace'


def test_register_rejects_a_duplicate_email(client, alice):
    resp = client.post('/api/auth/register', {
        'email': alice.email.upper(), 'first_name': 'A', 'last_name': 'B',
        'password1': PASSWORD, 'password2': PASSWORD,
    }, content_type='application/json')

    assert resp.status_code == 400
    assert 'email' in resp.json()['errors']


def test_login_and_logout(client, alice):
    bad = client.post('/api/auth/login', {'email': alice.email, 'password': 'nope'}, content_type='application/json')
    assert bad.status_code == 401

    good = client.post('/api/auth/login', {'email': alice.email, 'password': PASSWORD}, content_type='application/json')
    assert good.status_code == 200
    assert good.json()['id'] == alice.pk

    client.post('/api/auth/logout')
    assert client.get('/api/auth/user').status_code == 302


def test_api_client_fetches_a_csrf_token_before_posting(alice, bob):
    client = Client(enforce_csrf_checks=True)
    login = {'email': alice.email, 'password': PASSWORD}

    refused = client.post('/api/auth/login', login, content_type='application/json')
    assert refused.status_code == 403

    token = client.get('/api/auth/csrf').json()['csrfToken']
    assert 'csrftoken' in client.cookies
    logged_in = client.post('/api/auth/login', login, content_type='application/json', HTTP_X_CSRFTOKEN=token)
    assert logged_in.status_code == 200

    # Logging in rotates the token; the fresh cookie comes back on the login response
    token = client.cookies['csrftoken'].value
    sent = client.post(f'/api/chats/{bob.pk}/messages', {'content': 'hi'},
                       content_type='application/json', HTTP_X_CSRFTOKEN=token)
    assert sent.status_code == 201

    missing = client.post(f'/api/chats/{bob.pk}/messages', {'content': 'hi'}, content_type='application/json')
    assert missing.status_code == 403


def test_profile_update_only_touches_sent_fields(client, alice):
    client.force_login(alice)

    resp = client.put('/api/users/profile', {'bio': 'Maths tutor'}, content_type='application/json')

    assert resp.status_code == 200
    assert resp.json()['bio'] == 'Maths tutor'
    assert resp.json()['status'] == 'active'

    resp = client.put('/api/users/profile', {'status': 'sleeping'}, content_type='application/json')
    assert resp.status_code == 400


def test_blank_usernames_do_not_collide(client, alice, bob):
    client.force_login(alice)
    assert client.put('/api/users/profile', {'username': ''}, content_type='application/json').status_code == 200
    client.force_login(bob)
    assert client.put('/api/users/profile', {'username': ''}, content_type='application/json').status_code == 200

    alice.refresh_from_db()
    bob.refresh_from_db()
    assert alice.username is None and bob.username is None


def test_search_excludes_yourself(client, alice, bob):
    client.force_login(alice)

    found = client.get('/api/users/search?q=student').json()

    assert [u['id'] for u in found] == [bob.pk]
    assert client.get('/api/users/search').status_code == 400


def test_online_users_reads_the_presence_set(client, alice, bob):
    set_user_online(bob.pk, True)
    client.force_login(alice)

    assert client.get('/api/users/online').json() == {'userIds': [bob.pk]}


def test_friend_request_flow_notifies_both_sides(client, live_registry, connect, alice, bob):
    alice_socket = connect(live_registry, alice.pk)
    bob_socket = connect(live_registry, bob.pk)
    client.force_login(alice)

    sent = client.post('/api/friends/request', {'addresseeId': bob.pk}, content_type='application/json')
    assert sent.status_code == 201
    [notification] = bob_socket.transport.events('notification')
    assert notification['message']['friendshipId'] == sent.json()['id']

    client.force_login(bob)
    pending = client.get('/api/friends/requests').json()
    assert [p['requester']['id'] for p in pending] == [alice.pk]

    accepted = client.post(f'/api/friends/requests/{sent.json()["id"]}/accept')
    assert accepted.json()['status'] == 'accepted'
    assert len(alice_socket.transport.events('notification')) == 1
    assert [u['id'] for u in client.get('/api/friends').json()] == [alice.pk]


def test_only_the_addressee_answers_a_request(client, alice, bob):
    friendship = services.send_friend_request(alice, bob)
    client.force_login(alice)

    resp = client.post(f'/api/friends/requests/{friendship.pk}/accept')

    assert resp.status_code == 403
    friendship.refresh_from_db()
    assert friendship.status == Friendship.PENDING


def test_friend_request_rules(alice, bob):
    with pytest.raises(ValidationError):
        services.send_friend_request(alice, alice)

    friendship = services.send_friend_request(alice, bob)
    with pytest.raises(ValidationError):
        services.send_friend_request(bob, alice)

    services.respond_to_friend_request(friendship, bob, accept=False)
    # A rejected request can be sent again
    again = services.send_friend_request(alice, bob)
    assert again.pk == friendship.pk
    assert again.status == Friendship.PENDING

    services.respond_to_friend_request(again, bob, accept=True)
    assert services.are_friends(bob.pk, alice.pk)
    with pytest.raises(ValidationError):
        services.send_friend_request(bob, alice)


def test_status_feed_shows_friends_and_self_only(client, make_user, alice, bob):
    stranger = make_user('Eve')
    friendship = services.send_friend_request(alice, bob)
    services.respond_to_friend_request(friendship, bob, accept=True)
    Status.objects.create(user=bob, content='Passed calculus!')
    Status.objects.create(user=stranger, content='Not visible')
    client.force_login(alice)

    created = client.post('/api/status', {'content': 'Started revision', 'type': 'update'}, content_type='application/json')
    feed = client.get('/api/status/feed').json()

    assert created.status_code == 201
    assert {s['content'] for s in feed} == {'Passed calculus!', 'Started revision'}
