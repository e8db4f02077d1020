# accounts/admin.py

# Import admin from django.contrib because this file configures the admin site.
from django.contrib import admin
# Import models from .models because User, Friendship and Status need to be registered.
from .models import User, Friendship, Status


class FriendshipAdmin(admin.ModelAdmin):
    list_display = ('requester', 'addressee', 'status', 'created_at')
    list_filter = ('status',)


"""
This block of code makes the user database tables visible
in the Django admin control panel. This allows an
administrator to manually view or edit users, friend
requests and status posts.
"""
admin.site.register(User)
admin.site.register(Friendship, FriendshipAdmin)
admin.site.register(Status)
