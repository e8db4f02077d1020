# config/asgi.py

# Import os because 'DJANGO_SETTINGS_MODULE' is set here.
import os
# Import get_asgi_application from django.core.asgi because plain HTTP requests still go to Django.
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

django_asgi_app = get_asgi_application()

# Import ProtocolTypeRouter, URLRouter from channels.routing because HTTP and WebSocket traffic are split here.
from channels.routing import ProtocolTypeRouter, URLRouter
# Import AuthMiddlewareStack from channels.auth because sockets see the logged in session user.
from channels.auth import AuthMiddlewareStack
# Import routing from messaging because it holds the '/ws/' route.
from messaging import routing as messaging_routing

"""
This file is the main entry-point for the server. It acts as
a traffic controller that splits incoming connections.
It sends all normal API (HTTP) requests to Django, and
sends all real-time (WebSocket) requests to the 'channels'
routing system.
RT: The messaging routing builds its consumer with the
process-wide connection registry, so HTTP views and sockets
served by this application share one registry.
"""
application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AuthMiddlewareStack(
        URLRouter(
            messaging_routing.websocket_urlpatterns
        )
    ),
})
