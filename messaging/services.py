# messaging/services.py

# Import get_user_model from django.contrib.auth because direct messages look up their recipient.
from django.contrib.auth import get_user_model
# Import PermissionDenied, ValidationError from django.core.exceptions because callers map them to 403 and 400.
from django.core.exceptions import PermissionDenied, ValidationError
# Import Q, Value from django.db.models because conversations are matched in both directions.
from django.db.models import Q, Value
# Import Coalesce from django.db.models.functions because 'mark_message_read' keeps an existing delivered time.
from django.db.models.functions import Coalesce
# Import timezone from django.utils because delivered and read times are stamped here.
from django.utils import timezone

# Import Room, SharedFile from rooms.models because room and file messages point at them.
from rooms.models import Room, SharedFile
# Import is_room_member from rooms.services because only members may post to a room.
from rooms.services import is_room_member
# Import Message from .models because this module creates and updates messages.
from .models import Message

User = get_user_model()


def message_to_dict(message):
    # Only plain column values, so this never triggers a query
    return {
        'id': message.pk,
        'content': message.content,
        'senderId': message.sender_id,
        'roomId': message.room_id,
        'recipientId': message.recipient_id,
        'messageType': message.message_type,
        'fileId': message.file_id,
        'replyToId': message.reply_to_id,
        'status': message.status,
        'createdAt': message.created_at,
        'deliveredAt': message.delivered_at,
        'readAt': message.read_at,
    }


def user_exists(user_id):
    return User.objects.filter(pk=user_id, is_active=True).exists()


"""
Saves a new message after checking who may send it where.
Room messages need the sender to be a room member; direct
messages need an active recipient other than the sender.
RT: Both the WebSocket 'message' event and the HTTP message
endpoints go through this function before anything is
broadcast.
"""
def create_message(sender_id, content='', room_id=None, recipient_id=None,
                   message_type=Message.TEXT, file_id=None, reply_to_id=None):
    if (room_id is None) == (recipient_id is None):
        raise ValidationError('A message needs exactly one of roomId or recipientId.')

    content = content or ''
    if message_type == Message.TEXT and not content.strip():
        raise ValidationError('Text messages cannot be empty.')
    if message_type == Message.FILE and file_id is None:
        raise ValidationError('File messages need a fileId.')

    if room_id is not None:
        if not Room.objects.filter(pk=room_id).exists():
            raise Room.DoesNotExist('Room not found.')
        if not is_room_member(room_id, sender_id):
            raise PermissionDenied('You are not a member of this room.')
    else:
        if recipient_id == sender_id:
            raise ValidationError('You cannot send a direct message to yourself.')
        if not user_exists(recipient_id):
            raise User.DoesNotExist('Recipient not found.')

    if file_id is not None and not SharedFile.objects.visible().filter(pk=file_id).exists():
        raise SharedFile.DoesNotExist('File not found.')

    if reply_to_id is not None:
        reply_to = Message.objects.filter(pk=reply_to_id, is_deleted=False).first()
        if reply_to is None:
            raise Message.DoesNotExist('The message being replied to was not found.')
        same_conversation = (
            reply_to.room_id == room_id if room_id is not None
            else {reply_to.sender_id, reply_to.recipient_id} == {sender_id, recipient_id}
        )
        if not same_conversation:
            raise ValidationError('Replies must stay in the same conversation.')

    return Message.objects.create(
        sender_id=sender_id,
        content=content,
        room_id=room_id,
        recipient_id=recipient_id,
        message_type=message_type,
        file_id=file_id,
        reply_to_id=reply_to_id,
    )


def mark_delivered(message_id):
    # Conditional update: only the first caller moves sent -> delivered
    now = timezone.now()
    changed = Message.objects.filter(pk=message_id, status=Message.SENT).update(
        status=Message.DELIVERED, delivered_at=now,
    )
    return now if changed else None


"""
Marks one message as read by 'reader_id'. Direct messages can
only be read by their recipient; room messages by any member
who didn't send them. Returns the message and whether this
call actually changed its status, so read receipts are sent
once per transition.
"""
def mark_message_read(message_id, reader_id):
    message = Message.objects.get(pk=message_id, is_deleted=False)

    if message.is_direct:
        if message.recipient_id != reader_id:
            raise PermissionDenied('Only the recipient can mark this message as read.')
    else:
        if not is_room_member(message.room_id, reader_id):
            raise PermissionDenied('You are not a member of this room.')
        if message.sender_id == reader_id:
            return message, False

    now = timezone.now()
    changed = Message.objects.filter(pk=message.pk).exclude(status=Message.READ).update(
        status=Message.READ, read_at=now, delivered_at=Coalesce('delivered_at', Value(now)),
    )
    if changed:
        message.refresh_from_db(fields=['status', 'read_at', 'delivered_at'])
    return message, bool(changed)


def mark_chat_read(partner_id, reader_id):
    unread = Message.objects.filter(
        sender_id=partner_id, recipient_id=reader_id, is_deleted=False,
    ).exclude(status=Message.READ)
    message_ids = list(unread.values_list('id', flat=True))
    if not message_ids:
        return []

    now = timezone.now()
    # Re-filter on status so a concurrent reader can't double count
    Message.objects.filter(pk__in=message_ids).exclude(status=Message.READ).update(
        status=Message.READ, read_at=now, delivered_at=Coalesce('delivered_at', Value(now)),
    )
    return message_ids


def get_room_messages(room_id, user_id, limit, offset=0):
    if not is_room_member(room_id, user_id):
        raise PermissionDenied('You are not a member of this room.')
    # Newest page first, returned oldest to newest
    page = Message.objects.filter(room_id=room_id, is_deleted=False).order_by('-created_at', '-id')[offset:offset + limit]
    return list(reversed(page))


def get_direct_messages(user_id, partner_id, limit, offset=0):
    page = Message.objects.filter(
        Q(sender_id=user_id, recipient_id=partner_id) | Q(sender_id=partner_id, recipient_id=user_id),
        is_deleted=False,
    ).order_by('-created_at', '-id')[offset:offset + limit]
    return list(reversed(page))


def get_conversations(user_id):
    direct = Message.objects.filter(Q(sender_id=user_id) | Q(recipient_id=user_id), room__isnull=True, is_deleted=False)
    partner_ids = set()
    for sender_id, recipient_id in direct.values_list('sender_id', 'recipient_id'):
        partner_ids.add(recipient_id if sender_id == user_id else sender_id)

    conversations = []
    for partner in User.objects.filter(pk__in=partner_ids):
        thread = direct.filter(Q(sender_id=partner.pk) | Q(recipient_id=partner.pk))
        last_message = thread.order_by('-created_at', '-id').first()
        unread_count = thread.filter(sender_id=partner.pk).exclude(status=Message.READ).count()
        conversations.append({
            'partner': partner.to_dict(),
            'lastMessage': message_to_dict(last_message),
            'unreadCount': unread_count,
        })

    conversations.sort(key=lambda c: c['lastMessage']['createdAt'], reverse=True)
    return conversations
