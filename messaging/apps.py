# messaging/apps.py

# Import AppConfig from django.apps because it's the base class for a Django app configuration.
from django.apps import AppConfig

"""
This class tells Django that an app named "messaging" exists.
This app handles room and direct messages, read receipts and
the whole real-time layer.
Its "ready" function builds the real-time objects exactly once
per server process: the connection registry, the database
gateway, the fanout engine and the presence channel. The
WebSocket routing and the HTTP views both reach them through
this config, so they always share the same registry.
RT: This app contains the WebSocket consumer and everything it
broadcasts through.
"""
class MessagingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'messaging'

    def ready(self):
        from .fanout import FanoutEngine
        from .gateway import PersistenceGateway
        from .presence import PresenceChannel
        from .registry import ConnectionRegistry

        self.registry = ConnectionRegistry()
        self.gateway = PersistenceGateway()
        self.fanout = FanoutEngine(self.registry, self.gateway)
        self.presence = PresenceChannel(self.registry, self.gateway, self.fanout)
