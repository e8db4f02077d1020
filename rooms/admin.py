# rooms/admin.py

# Import admin from django.contrib because this file configures the admin site.
from django.contrib import admin
# Import models from .models because rooms, members, subjects and files need to be registered.
from .models import Room, RoomMember, Subject, Subcategory, SharedFile


class RoomMemberInline(admin.TabularInline):
    model = RoomMember
    extra = 0


class RoomAdmin(admin.ModelAdmin):
    list_display = ('name', 'creator', 'created_at') # columns shown when you open the Room list in admin
    search_fields = ('name',)
    inlines = [RoomMemberInline]


class SharedFileAdmin(admin.ModelAdmin):
    list_display = ('file_name', 'room', 'subject', 'uploader', 'is_deleted', 'created_at')
    list_filter = ('is_deleted', 'file_type')
    search_fields = ('file_name', 'original_name')

"""
This block of code makes the main database tables for the
'rooms' app visible and editable within the Django admin
control panel.
"""
admin.site.register(Room, RoomAdmin)
admin.site.register(Subject)
admin.site.register(Subcategory)
admin.site.register(SharedFile, SharedFileAdmin)
