# messaging/gateway.py

# Import database_sync_to_async from channels.db because it lets our async code safely talk to the sync database.
from channels.db import database_sync_to_async

# Import is_room_member, get_room_member_ids from rooms.services because fanout needs the room's members.
from rooms.services import is_room_member, get_room_member_ids
# Import services because every gateway method wraps one of them.
from . import services

"""
The real-time layer's only way into the database. Each method
wraps a sync function from services.py and runs it in the
worker thread pool, so a slow query never blocks the event loop
for other sockets. Messages come back already turned into plain
dicts, so no lazy model access happens on the async side.
RT: Everything the consumer and the fanout engine await on.
"""
class PersistenceGateway:

    @database_sync_to_async
    def user_exists(self, user_id):
        return services.user_exists(user_id)

    @database_sync_to_async
    def is_room_member(self, room_id, user_id):
        return is_room_member(room_id, user_id)

    @database_sync_to_async
    def get_room_member_ids(self, room_id):
        return get_room_member_ids(room_id)

    @database_sync_to_async
    def create_message(self, sender_id, **fields):
        return services.message_to_dict(services.create_message(sender_id, **fields))

    @database_sync_to_async
    def mark_delivered(self, message_id):
        return services.mark_delivered(message_id)

    @database_sync_to_async
    def mark_message_read(self, message_id, reader_id):
        message, changed = services.mark_message_read(message_id, reader_id)
        return services.message_to_dict(message), changed

    @database_sync_to_async
    def mark_chat_read(self, partner_id, reader_id):
        return services.mark_chat_read(partner_id, reader_id)
