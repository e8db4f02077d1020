# messaging/registry.py

# Import json because events are pushed to sockets as JSON text.
import json
# Import logging because a replaced socket is logged.
import logging
# Import threading because HTTP worker threads and the event loop share these maps.
import threading

# Import DjangoJSONEncoder from django.core.serializers.json because message dicts carry datetimes.
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


class ConnectionClosed(Exception):
    """Raised when an event is sent to a connection that has already closed."""


"""
One live WebSocket as seen by the rest of the server. It wraps
the consumer that owns the socket (the "transport") and keeps
track of which user it belongs to and which rooms it joined.
Life cycle: connected (anonymous) -> authenticated -> joins and
leaves rooms any number of times -> closed. Closed is final.
"""
class Connection:
    def __init__(self, transport, channel_name=None):
        self.transport = transport
        self.channel_name = channel_name
        self.user_id = None
        self.rooms = set()
        self.closed = False

    def __repr__(self):
        return f"<Connection user={self.user_id} rooms={sorted(self.rooms)} closed={self.closed}>"

    @property
    def is_authenticated(self):
        return self.user_id is not None

    @property
    def is_open(self):
        return not self.closed

    async def send_event(self, event):
        if self.closed:
            raise ConnectionClosed(f"connection for user {self.user_id} is closed")
        await self.transport.send(text_data=json.dumps(event, cls=DjangoJSONEncoder))


"""
The process-wide record of which users and rooms currently have
a reachable socket. One registry is built per process (see
MessagingConfig.ready) and handed to the consumer and the HTTP
views, so tests can build their own.

Two indexes are kept:
- users: user id -> the user's current Connection. A second
  socket from the same user replaces the first ("last socket
  wins"); the old socket is not closed, it just can't be looked
  up any more.
- rooms: room id -> Connections that explicitly joined the room.
  This only scopes typing indicators. It is NOT who may read a
  room's messages; the RoomMember table decides that.

Every mutation happens under one lock so a sync view running in
a worker thread can't interleave with the event loop.
RT: Only a connection's own lifecycle (authenticate, join, leave,
disconnect, or a failed send to it) ever changes its entries.
"""
class ConnectionRegistry:
    def __init__(self):
        self._lock = threading.RLock()
        self._users = {}
        self._rooms = {}

    def __len__(self):
        with self._lock:
            return len(self._users)

    def register(self, user_id, connection):
        with self._lock:
            # A connection belongs to one user; drop a stale binding first
            if connection.user_id is not None and connection.user_id != user_id:
                if self._users.get(connection.user_id) is connection:
                    del self._users[connection.user_id]
            connection.user_id = user_id
            previous = self._users.get(user_id)
            self._users[user_id] = connection

        if previous is not None and previous is not connection:
            logger.info("User %s opened a new socket; the previous one is no longer reachable", user_id)

    def join_room(self, room_id, connection):
        with self._lock:
            if not connection.is_authenticated or connection.closed:
                return False
            self._rooms.setdefault(room_id, set()).add(connection)
            connection.rooms.add(room_id)
        return True

    def leave_room(self, room_id, connection):
        with self._lock:
            self._discard_from_room(room_id, connection)
            connection.rooms.discard(room_id)

    def unregister(self, connection):
        # Safe to call more than once and on half-initialised connections
        with self._lock:
            user_id = connection.user_id
            if user_id is not None and self._users.get(user_id) is connection:
                del self._users[user_id]
            for room_id in list(connection.rooms):
                self._discard_from_room(room_id, connection)
            connection.rooms.clear()
            connection.closed = True

    def lookup_user(self, user_id):
        with self._lock:
            return self._users.get(user_id)

    def lookup_room(self, room_id):
        with self._lock:
            return frozenset(self._rooms.get(room_id, ()))

    def online_user_ids(self):
        with self._lock:
            return set(self._users)

    def _discard_from_room(self, room_id, connection):
        members = self._rooms.get(room_id)
        if members is None:
            return
        members.discard(connection)
        # Empty room entries are removed so the index can't grow forever
        if not members:
            del self._rooms[room_id]
