# accounts/urls.py

# Import path from django.urls because we need it to define URL patterns.
from django.urls import path
# Import the views from .views because each URL below points at one.
from .views import (
    csrf_view, register_view, login_view, logout_view, current_user_view,
    update_profile_view, search_users_view, online_users_view,
    send_friend_request_view, friend_requests_view, accept_friend_request_view,
    reject_friend_request_view, friends_view,
    create_status_view, status_feed_view,
)

urlpatterns = [
    # Auth
    path('auth/csrf', csrf_view, name='csrf'),
    path('auth/register', register_view, name='register'),
    path('auth/login', login_view, name='login'),
    path('auth/logout', logout_view, name='logout'),
    path('auth/user', current_user_view, name='current_user'),

    # Users
    path('users/profile', update_profile_view, name='update_profile'),
    path('users/search', search_users_view, name='search_users'),
    path('users/online', online_users_view, name='online_users'),

    # Friends
    path('friends', friends_view, name='friends'),
    path('friends/request', send_friend_request_view, name='send_friend_request'),
    path('friends/requests', friend_requests_view, name='friend_requests'),
    path('friends/requests/<int:friendship_id>/accept', accept_friend_request_view, name='accept_friend_request'),
    path('friends/requests/<int:friendship_id>/reject', reject_friend_request_view, name='reject_friend_request'),

    # Status feed
    path('status', create_status_view, name='create_status'),
    path('status/feed', status_feed_view, name='status_feed'),
]
