# messaging/fanout.py

# Import logging because a failed delivery is logged, not raised.
import logging
# Import dataclass, field from dataclasses because 'DeliveryReport' is a plain record of who got what.
from dataclasses import dataclass, field

# Import DatabaseError from django.db because the delivered upgrade is best effort.
from django.db import DatabaseError

# Import constants because event type names live there.
from . import constants
# Import Message from .models because statuses are compared against its constants.
from .models import Message

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReport:
    message_id: int
    reached_user_ids: set = field(default_factory=set)
    delivered: bool = False


"""
Pushes a message that has already been saved to every live
socket that should see it.

- Room messages go to every *member* of the room (read from the
  database) who currently has a registered socket, whether or
  not that socket joined the room. Non-members never get them,
  even when they have joined the room index somehow.
- Direct messages go to the recipient and to the sender (so the
  sender's other tab and own UI stay in sync). If the recipient's
  socket took the push, the message moves from 'sent' to
  'delivered' and the sender is told.

Each push is isolated: a dead socket is logged and unregistered
and the loop carries on with the next recipient. Offline users
get nothing here; they read history over HTTP.
RT: Used by the WebSocket consumer and by every HTTP endpoint
that creates a message.
"""
class FanoutEngine:
    def __init__(self, registry, gateway):
        self.registry = registry
        self.gateway = gateway

    async def send(self, connection, event):
        if connection is None or not connection.is_open:
            return False
        try:
            await connection.send_event(event)
        except Exception:
            logger.warning(
                "Dropping %s event for user %s: socket send failed",
                event.get('type'), connection.user_id, exc_info=True,
            )
            self.registry.unregister(connection)
            return False
        return True

    async def send_to_user(self, user_id, event):
        return await self.send(self.registry.lookup_user(user_id), event)

    async def deliver(self, message):
        report = DeliveryReport(message_id=message['id'])
        event = {'type': constants.NEW_MESSAGE, 'data': message}

        if message['roomId'] is not None:
            member_ids = await self.gateway.get_room_member_ids(message['roomId'])
            for user_id in member_ids:
                if await self.send_to_user(user_id, event):
                    report.reached_user_ids.add(user_id)
            logger.debug("Room message %s reached %d of %d members",
                         message['id'], len(report.reached_user_ids), len(member_ids))
            return report

        sender_id = message['senderId']
        recipient_id = message['recipientId']

        recipient_reached = await self.send_to_user(recipient_id, event)
        if recipient_reached:
            report.reached_user_ids.add(recipient_id)
        if await self.send_to_user(sender_id, event):
            report.reached_user_ids.add(sender_id)

        if recipient_reached and message['status'] == Message.SENT:
            try:
                delivered_at = await self.gateway.mark_delivered(message['id'])
            except DatabaseError:
                # Best effort: the message stays "sent"
                logger.exception("Could not mark message %s as delivered", message['id'])
                delivered_at = None
            if delivered_at is not None:
                report.delivered = True
                message['status'] = Message.DELIVERED
                message['deliveredAt'] = delivered_at
                await self.send_to_user(sender_id, {
                    'type': constants.UPDATE_MESSAGE_STATUS,
                    'messageId': message['id'],
                    'status': Message.DELIVERED,
                    'deliveredAt': delivered_at,
                })
        return report

    async def notify_user(self, user_id, payload):
        return await self.send_to_user(user_id, {'type': constants.NOTIFICATION, 'message': payload})
