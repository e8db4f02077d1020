# messaging/utils.py

# Import apps from django.apps because the real-time objects live on the messaging app config.
from django.apps import apps
# Import async_to_sync from asgiref.sync because sync views need to call the async fanout engine.
from asgiref.sync import async_to_sync


def get_realtime():
    return apps.get_app_config('messaging')


"""
Helpers for sync code (views, management commands) that needs
to push something to live sockets. Under the ASGI server the
coroutine runs on the main event loop, the same loop that owns
the sockets.
RT: Every HTTP path that creates a message or a notification
ends up in one of these.
"""
def deliver_now(message):
    return async_to_sync(get_realtime().fanout.deliver)(message)


def notify_now(user_id, payload):
    return async_to_sync(get_realtime().fanout.notify_user)(user_id, payload)
