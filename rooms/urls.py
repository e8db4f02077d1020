# rooms/urls.py

# Import path from django.urls because it's needed to define each URL route.
from django.urls import path
# Import views from .views because all the functions that handle the room API are here.
from .views import (
    rooms_view, room_detail_view, room_members_view, remove_room_member_view,
    room_subjects_view, subject_subcategories_view,
    upload_file_view, room_files_view, search_files_view, delete_file_view,
)

"""
This file is the "address book" for the 'rooms' application.
It maps API addresses for rooms, members, subjects,
subcategories and shared files to the view that handles them.
"""
urlpatterns = [
    # Rooms
    path('rooms', rooms_view, name='rooms'),
    path('rooms/<int:room_id>', room_detail_view, name='room_detail'),

    # Members
    path('rooms/<int:room_id>/members', room_members_view, name='room_members'),
    path('rooms/<int:room_id>/members/<int:user_id>', remove_room_member_view, name='remove_room_member'),

    # Subjects and subcategories
    path('rooms/<int:room_id>/subjects', room_subjects_view, name='room_subjects'),
    path('subjects/<int:subject_id>/subcategories', subject_subcategories_view, name='subject_subcategories'),

    # Files
    path('files/upload', upload_file_view, name='upload_file'),
    path('files/search', search_files_view, name='search_files'),
    path('files/<int:file_id>', delete_file_view, name='delete_file'),
    path('rooms/<int:room_id>/files', room_files_view, name='room_files'),
]
