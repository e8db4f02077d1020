# messaging/consumers.py

# Import json because WebSocket messages are sent as text in JSON format.
import json
# Import logging because each socket's life cycle is logged.
import logging

# Import AsyncWebsocketConsumer from channels.generic.websocket because this is the base class for our real-time consumer.
from channels.generic.websocket import AsyncWebsocketConsumer
# Import apps from django.apps because the process-wide registry lives on the messaging app config.
from django.apps import apps
# Import settings from django.conf because 'REALTIME_REQUIRE_SESSION' decides who may authenticate.
from django.conf import settings
# Import the Django exceptions because each one becomes an 'error' event.
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
# Import DatabaseError from django.db because a failed save is reported to the sender.
from django.db import DatabaseError

# Import constants because event type names live there.
from . import constants
# Import the envelope forms from .forms because every incoming frame is validated by one.
from .forms import AuthenticateForm, CallForm, MessageForm, RoomEnvelopeForm, TypingForm
# Import Connection from .registry because each socket is wrapped in one.
from .registry import Connection

logger = logging.getLogger(__name__)


def _error_text(error):
    if isinstance(error, ValidationError):
        return ' '.join(error.messages)
    return str(error) or error.__class__.__name__


"""
This class is the "brain" for the real-time side of the app.
Each browser tab opens one socket to it. The socket starts out
anonymous, the browser sends 'authenticate' with its user id,
and can then join rooms, send messages, typing updates and call
signals.
The consumer itself only validates envelopes and answers the
sender; who else hears about an event is decided by the
connection registry, the fanout engine and the presence channel
it was built with.
Channels hands this consumer one incoming frame at a time, so
events from one socket are handled in the order they arrived.
RT: This entire class is the WebSocket endpoint at /ws/.
"""
class ChatConsumer(AsyncWebsocketConsumer):

    def __init__(self, *args, registry=None, gateway=None, fanout=None, presence=None, **kwargs):
        super().__init__(*args, **kwargs)
        realtime = apps.get_app_config('messaging')
        self.registry = registry if registry is not None else realtime.registry
        self.gateway = gateway if gateway is not None else realtime.gateway
        self.fanout = fanout if fanout is not None else realtime.fanout
        self.presence = presence if presence is not None else realtime.presence
        self.connection = None

    """
    Runs when the browser opens the socket. The connection is
    accepted straight away but stays anonymous until the
    browser sends 'authenticate'.
    """
    async def connect(self):
        self.connection = Connection(self, channel_name=getattr(self, 'channel_name', None))
        await self.accept()
        logger.info("WebSocket client connected")

    """
    Runs when the socket closes for any reason. The connection is
    removed from the registry (only its own entries), and if the
    user has no newer socket, they are scheduled to go offline.
    """
    async def disconnect(self, close_code):
        if self.connection is None:
            return
        user_id = self.connection.user_id
        self.registry.unregister(self.connection)

        if user_id is not None:
            if self.channel_layer is not None:
                await self.channel_layer.group_discard(constants.PRESENCE_GROUP_NAME, self.channel_name)
            if self.registry.lookup_user(user_id) is None:
                self.presence.schedule_offline(user_id)
        logger.info("WebSocket client disconnected (user=%s, code=%s)", user_id, close_code)

    """
    Runs every time the browser sends a frame. It decodes the
    JSON envelope, picks the handler from the 'type' field, and
    turns any problem into an 'error' event for this socket only.
    """
    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data) if text_data is not None else None
        except ValueError:
            data = None
        if not isinstance(data, dict) or not isinstance(data.get('type'), str):
            await self.send_error('Malformed message: expected a JSON object with a "type" field.')
            return

        message_type = data['type']
        try:
            if message_type == constants.AUTHENTICATE:
                await self.handle_authenticate(data)
            elif message_type == constants.JOIN_ROOM:
                await self.handle_join_room(data)
            elif message_type == constants.LEAVE_ROOM:
                await self.handle_leave_room(data)
            elif message_type == constants.MESSAGE:
                await self.handle_message(data)
            elif message_type == constants.TYPING:
                await self.handle_typing(data)
            elif message_type == constants.CALL:
                await self.handle_call(data)
            else:
                raise ValidationError(f'Unknown message type "{message_type}".')
        except (ValidationError, PermissionDenied, ObjectDoesNotExist) as e:
            await self.send_error(_error_text(e), message_type)
        except DatabaseError:
            logger.exception("Database error while handling %s event", message_type)
            await self.send_error('The server could not save your request.', message_type)

    async def send_event(self, event):
        await self.fanout.send(self.connection, event)

    async def send_error(self, message, request_type=None):
        await self.send_event({'type': constants.ERROR, 'message': message, 'requestType': request_type})

    def require_authenticated(self):
        if not self.connection.is_authenticated:
            raise PermissionDenied('Authenticate before sending this event.')
        return self.connection.user_id

    def require_same_user(self, claimed_user_id):
        user_id = self.require_authenticated()
        if claimed_user_id is not None and claimed_user_id != user_id:
            raise PermissionDenied('You can only act as the user this socket authenticated as.')
        return user_id

    def validate(self, form_class, data):
        form = form_class(data)
        if not form.is_valid():
            raise ValidationError([
                f'{field}: {error}' if field != '__all__' else error
                for field, errors in form.errors.items() for error in errors
            ])
        return form

    # --- Envelope handlers ---

    async def handle_authenticate(self, data):
        user_id = self.validate(AuthenticateForm, data).cleaned_data['userId']

        # Authentication is one-way: a socket can't switch users
        if self.connection.is_authenticated:
            if self.connection.user_id != user_id:
                raise PermissionDenied('This socket is already authenticated as another user.')
            await self.send_event({'type': constants.AUTHENTICATED, 'userId': user_id})
            return

        session_user = self.scope.get('user')
        if session_user is not None and session_user.is_authenticated:
            if session_user.pk != user_id:
                raise PermissionDenied('userId does not match the logged in user.')
        elif settings.REALTIME_REQUIRE_SESSION:
            raise PermissionDenied('Log in before opening a real-time connection.')
        elif not await self.gateway.user_exists(user_id):
            raise PermissionDenied('Unknown user.')

        self.registry.register(user_id, self.connection)
        if self.channel_layer is not None:
            await self.channel_layer.group_add(constants.PRESENCE_GROUP_NAME, self.channel_name)
        await self.send_event({'type': constants.AUTHENTICATED, 'userId': user_id})
        await self.presence.user_online(user_id)
        logger.info("WebSocket authenticated for user %s", user_id)

    async def handle_join_room(self, data):
        user_id = self.require_authenticated()
        room_id = self.validate(RoomEnvelopeForm, data).cleaned_data['roomId']
        # The registry trusts its caller, so membership is checked here
        if not await self.gateway.is_room_member(room_id, user_id):
            raise PermissionDenied('You are not a member of this room.')
        if not self.registry.join_room(room_id, self.connection):
            raise PermissionDenied('This connection cannot join rooms.')
        await self.send_event({'type': constants.JOINED_ROOM, 'roomId': room_id})

    async def handle_leave_room(self, data):
        self.require_authenticated()
        room_id = self.validate(RoomEnvelopeForm, data).cleaned_data['roomId']
        self.registry.leave_room(room_id, self.connection)
        await self.send_event({'type': constants.LEFT_ROOM, 'roomId': room_id})

    async def handle_message(self, data):
        self.require_authenticated()
        form = self.validate(MessageForm, data)
        sender_id = self.require_same_user(form.cleaned_data.get('senderId'))

        # Saved first; a message that failed to save is never broadcast
        message = await self.gateway.create_message(sender_id, **form.message_fields())
        await self.send_event({'type': constants.MESSAGE_SENT, 'message': message})
        await self.fanout.deliver(message)

    async def handle_typing(self, data):
        cleaned = self.validate(TypingForm, data).cleaned_data
        self.require_same_user(cleaned.get('userId'))
        await self.presence.broadcast_typing(self.connection, cleaned['roomId'], cleaned['isTyping'])

    async def handle_call(self, data):
        self.require_authenticated()
        target_user_id = self.validate(CallForm, data).cleaned_data['targetUserId']
        await self.presence.forward_call(self.connection, target_user_id, data)

    # --- Channel layer handlers ---

    """
    Receives a presence update message (someone went online/offline)
    sent to the global presence group and forwards it down the WebSocket
    to this user's browser.
    RT: Pushes an online/offline status update to the browser for the green dots.
    """
    async def broadcast_presence(self, event):
        await self.send_event({
            'type': constants.PRESENCE_UPDATE,
            'userId': event['user_id'],
            'status': event['status'],
        })
