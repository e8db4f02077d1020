# core/apps.py

# Import AppConfig from django.apps because it's the base class for a Django app configuration.
from django.apps import AppConfig

"""
This class tells Django that an app named "core" exists.
This app holds project-wide helpers (like the 'utils.py'
file with the online user cache and JSON request helpers)
that don't belong to just one feature like 'accounts',
'rooms' or 'messaging'.
"""
class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
