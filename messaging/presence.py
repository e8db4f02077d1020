# messaging/presence.py

# Import asyncio because the delayed "mark offline" task needs it for 'sleep'.
import asyncio
# Import logging because presence changes are logged.
import logging

# Import database_sync_to_async from channels.db because the online set is updated from async code.
from channels.db import database_sync_to_async
# Import get_channel_layer from channels.layers because presence is broadcast to the 'global_presence' group.
from channels.layers import get_channel_layer
# Import settings from django.conf because the offline grace period is configurable.
from django.conf import settings
# Import PermissionDenied, ValidationError from django.core.exceptions because bad typing or call events are reported to the sender.
from django.core.exceptions import PermissionDenied, ValidationError

# Import set_user_online from core.utils because the online set lives in the cache.
from core.utils import set_user_online
# Import constants because event type names live there.
from . import constants

logger = logging.getLogger(__name__)

"""
Routes the short-lived signals that are never stored as their
own rows: typing indicators, read receipts, call signaling and
online/offline presence.
- Typing only goes to sockets that joined the room, because
  "who is looking at this room right now" is exactly the
  audience for it.
- Read receipts do write (the message status), and tell the
  original sender once per real status change.
- Call payloads are passed through untouched to one user.
RT: The consumer calls into this for typing, call and presence;
the HTTP read endpoints call into it for receipts.
"""
class PresenceChannel:
    def __init__(self, registry, gateway, fanout):
        self.registry = registry
        self.gateway = gateway
        self.fanout = fanout
        # Scheduled "mark offline" tasks, keyed by user id
        self.offline_tasks = {}

    async def broadcast_typing(self, connection, room_id, is_typing):
        if room_id not in connection.rooms:
            raise PermissionDenied('Join the room before sending typing updates.')
        event = {
            'type': constants.TYPING,
            'userId': connection.user_id,
            'roomId': room_id,
            'isTyping': is_typing,
        }
        reached = 0
        for other in self.registry.lookup_room(room_id):
            if other is connection:
                continue
            if await self.fanout.send(other, event):
                reached += 1
        return reached

    async def mark_message_read(self, message_id, reader_id):
        message, changed = await self.gateway.mark_message_read(message_id, reader_id)
        if changed:
            await self.fanout.send_to_user(message['senderId'], {
                'type': constants.MESSAGE_READ,
                'messageId': message['id'],
                'readerId': reader_id,
                'readAt': message['readAt'],
            })
        return message, changed

    async def mark_chat_read(self, partner_id, reader_id):
        message_ids = await self.gateway.mark_chat_read(partner_id, reader_id)
        if message_ids:
            await self.fanout.send_to_user(partner_id, {
                'type': constants.CHAT_MESSAGES_READ,
                'readerId': reader_id,
                'partnerId': partner_id,
                'messageIds': message_ids,
            })
        return message_ids

    async def forward_call(self, connection, target_user_id, envelope):
        if target_user_id == connection.user_id:
            raise ValidationError('You cannot call yourself.')
        # The payload is opaque: forwarded exactly as received
        if not await self.fanout.send_to_user(target_user_id, envelope):
            raise ValidationError('The user you are calling is not connected.')

    """
    Marks the user as online (if a pending offline task exists,
    it is cancelled first, which covers quick page refreshes)
    and tells everyone in the presence group.
    RT: Called right after a socket authenticates.
    """
    async def user_online(self, user_id):
        task = self.offline_tasks.pop(user_id, None)
        if task is not None:
            task.cancel()
        await self.update_user_presence(user_id, is_online=True)

    """
    Instead of immediately marking the user offline, schedule it
    to happen after a short grace period. This prevents them from
    appearing offline if they just refresh the page quickly.
    """
    def schedule_offline(self, user_id):
        previous = self.offline_tasks.pop(user_id, None)
        if previous is not None:
            previous.cancel()
        self.offline_tasks[user_id] = asyncio.create_task(self.delayed_offline(user_id))

    async def delayed_offline(self, user_id):
        try:
            await asyncio.sleep(settings.REALTIME_OFFLINE_GRACE_SECONDS)
            # The user may have reconnected on a new socket meanwhile
            if self.registry.lookup_user(user_id) is None:
                await self.update_user_presence(user_id, is_online=False)
        finally:
            if self.offline_tasks.get(user_id) is asyncio.current_task():
                del self.offline_tasks[user_id]

    async def update_user_presence(self, user_id, is_online):
        changed = await database_sync_to_async(set_user_online)(user_id, is_online)
        if not changed:
            return
        logger.info("User %s is now %s", user_id, "online" if is_online else "offline")
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        await channel_layer.group_send(
            constants.PRESENCE_GROUP_NAME,
            {'type': 'broadcast_presence', 'user_id': user_id, 'status': 'online' if is_online else 'offline'},
        )
