# messaging/admin.py

# Import admin from django.contrib because this file configures the admin site.
from django.contrib import admin
# Import models from .models because 'Message' needs to be registered.
from .models import Message


class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'room', 'recipient', 'message_type', 'status', 'created_at')
    list_filter = ('message_type', 'status', 'is_deleted')
    search_fields = ('content',)

"""
This block of code makes the message table visible in the
Django admin control panel, so an administrator can look at
room and direct messages and their delivery status.
"""
admin.site.register(Message, MessageAdmin)
