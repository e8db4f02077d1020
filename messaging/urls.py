# messaging/urls.py

# Import path from django.urls because it's needed to define URL routes.
from django.urls import path
# Import views from .views because we need to map URLs to these functions.
from .views import (
    send_message_view, mark_message_read_view, mark_chat_read_view,
    room_messages_view, chat_list_view, chat_messages_view,
)

"""
This file defines the API addresses for the 'messaging' app.
The POST routes here save a message (or a read receipt) and
then push it to live sockets.
"""
urlpatterns = [
    # Route for sending a room or direct message
    path('messages', send_message_view, name='send_message'),
    # Route for marking one message as read
    path('messages/<int:message_id>/read', mark_message_read_view, name='mark_message_read'),

    # Direct conversations
    path('chats', chat_list_view, name='chat_list'),
    path('chats/<int:user_id>/messages', chat_messages_view, name='chat_messages'),
    path('chats/<int:user_id>/read', mark_chat_read_view, name='mark_chat_read'),

    # Room history
    path('rooms/<int:room_id>/messages', room_messages_view, name='room_messages'),
]
