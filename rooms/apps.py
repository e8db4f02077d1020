# rooms/apps.py

# Import AppConfig from django.apps because it's the base class for a Django app configuration.
from django.apps import AppConfig

"""
This class tells Django that an app named "rooms" exists.
This app handles the study rooms, their members, subjects,
subcategories and shared files. Its "ready" function imports
'signals.py' so a room's creator always becomes a member.
"""
# tells Django about this app: its name and default ID field type
class RoomsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'rooms'

    def ready(self):
        import rooms.signals
