# messaging/routing.py

# Import apps from django.apps because the consumer is built with the app's shared registry.
from django.apps import apps
# Import path from django.urls because it's used to define WebSocket URL patterns.
from django.urls import path
# Import consumers from . because 'websocket_urlpatterns' needs the ChatConsumer.
from . import consumers

realtime = apps.get_app_config('messaging')

"""
This list defines the WebSocket address the app listens on.
There is a single socket per browser tab; rooms are joined by
sending 'join_room' on it rather than by opening a new URL.
RT: The consumer is handed the process-wide registry, gateway,
fanout engine and presence channel.
"""
websocket_urlpatterns = [
    path("ws/", consumers.ChatConsumer.as_asgi(
        registry=realtime.registry,
        gateway=realtime.gateway,
        fanout=realtime.fanout,
        presence=realtime.presence,
    )),
]
