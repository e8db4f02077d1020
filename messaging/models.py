# messaging/models.py

# Import models from django.db because this file defines database models.
from django.db import models
# Import settings from django.conf because 'Message' links to the User model.
from django.conf import settings
# Import Q from django.db.models because the room-or-recipient rule is a check constraint.
from django.db.models import Q

"""
This class represents a single chat message. A message is
either posted into a room (everyone in the room sees it) or
sent directly to one other user, never both and never neither;
the database constraint below enforces that.
The 'status' field only moves forward: sent -> delivered -> read.
RT: New 'Message' objects are created from both the WebSocket
'message' event and the HTTP API, and are always saved before
they are broadcast.
"""
class Message(models.Model):
    TEXT = 'text'
    FILE = 'file'
    VOICE = 'voice'
    SYSTEM = 'system'
    TYPE_CHOICES = (
        (TEXT, 'Text'),
        (FILE, 'File'),
        (VOICE, 'Voice'),
        (SYSTEM, 'System'),
    )

    SENT = 'sent'
    DELIVERED = 'delivered'
    READ = 'read'
    STATUS_CHOICES = (
        (SENT, 'Sent'),
        (DELIVERED, 'Delivered'),
        (READ, 'Read'),
    )

    content = models.TextField(blank=True)
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    room = models.ForeignKey('rooms.Room', on_delete=models.CASCADE, related_name='messages', blank=True, null=True)
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_messages', blank=True, null=True
    )
    message_type = models.CharField(max_length=6, choices=TYPE_CHOICES, default=TEXT)
    file = models.ForeignKey('rooms.SharedFile', on_delete=models.SET_NULL, related_name='messages', blank=True, null=True)
    reply_to = models.ForeignKey('self', on_delete=models.SET_NULL, related_name='replies', blank=True, null=True)
    status = models.CharField(max_length=9, choices=STATUS_CHOICES, default=SENT)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)
    expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    delivered_at = models.DateTimeField(blank=True, null=True)
    read_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ['created_at', 'id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(room__isnull=False, recipient__isnull=True) |
                    Q(room__isnull=True, recipient__isnull=False)
                ),
                name='message_has_exactly_one_target',
            ),
        ]
        indexes = [
            models.Index(fields=['sender', 'recipient', 'status']),
        ]

    def __str__(self):
        if self.room_id:
            return f"Message from {self.sender_id} in room {self.room_id}"
        return f"Message from {self.sender_id} to {self.recipient_id}"

    @property
    def is_direct(self):
        return self.recipient_id is not None
