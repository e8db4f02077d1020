# config/wsgi.py

# Import os because it's needed to set the 'DJANGO_SETTINGS_MODULE' environment variable.
import os
# Import get_wsgi_application from django.core.wsgi because 'application' needs it.
from django.core.wsgi import get_wsgi_application

"""
This file is the entry-point for the web server when it's running
in WSGI mode. It only serves the HTTP API: there are no sockets
in this mode, so messages posted here are saved but never pushed
live. Run the ASGI application (daphne) for real-time delivery.
"""
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_wsgi_application()
