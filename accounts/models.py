# accounts/models.py

# Import models from django.db because every model here is built from it.
from django.db import models
# Import Q from django.db.models because visible statuses are those that never expire or have not expired yet.
from django.db.models import Q
# Import AbstractUser from django.contrib.auth.models because 'User' extends Django's built-in user.
from django.contrib.auth.models import AbstractUser
# Import timezone from django.utils because status expiry is compared against now.
from django.utils import timezone
# Import CustomUserManager from .managers because users log in with their email.
from .managers import CustomUserManager


class User(AbstractUser):
    STATUS_CHOICES = (
        ('active', 'Active'),
        ('away', 'Away'),
        ('busy', 'Busy'),
    )

    username = models.CharField(max_length=150, unique=True, blank=True, null=True)
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=False)
    last_name = models.CharField(max_length=150, blank=False)

    bio = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    objects = CustomUserManager()

    def __str__(self):
        return self.email

    def to_dict(self):
        return {
            'id': self.pk,
            'email': self.email,
            'username': self.username,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'bio': self.bio,
            'status': self.status,
        }


"""
A friend request between two users. The row is created as
'pending' by the requester and moved to 'accepted' or
'rejected' by the addressee. Two users are friends when an
accepted row exists in either direction.
"""
class Friendship(models.Model):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    STATUS_CHOICES = (
        (PENDING, 'Pending'),
        (ACCEPTED, 'Accepted'),
        (REJECTED, 'Rejected'),
    )

    requester = models.ForeignKey(User, related_name='friend_requests_sent', on_delete=models.CASCADE)
    addressee = models.ForeignKey(User, related_name='friend_requests_received', on_delete=models.CASCADE)
    status = models.CharField(max_length=8, choices=STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('requester', 'addressee')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.requester} -> {self.addressee} ({self.status})"

    def to_dict(self):
        return {
            'id': self.pk,
            'requesterId': self.requester_id,
            'addresseeId': self.addressee_id,
            'status': self.status,
            'createdAt': self.created_at,
        }


class StatusQuerySet(models.QuerySet):
    def visible(self):
        now = timezone.now()
        return self.filter(is_deleted=False).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


# A Status is a short achievement or update shown in the friends feed
class Status(models.Model):
    TYPE_CHOICES = (
        ('achievement', 'Achievement'),
        ('update', 'Update'),
    )

    user = models.ForeignKey(User, related_name='statuses', on_delete=models.CASCADE)
    content = models.TextField()
    type = models.CharField(max_length=12, choices=TYPE_CHOICES, default='achievement')
    is_deleted = models.BooleanField(default=False)
    expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StatusQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'statuses'

    def __str__(self):
        return f"{self.user.first_name}: {self.content[:30]}"

    def to_dict(self):
        return {
            'id': self.pk,
            'userId': self.user_id,
            'content': self.content,
            'type': self.type,
            'expiresAt': self.expires_at,
            'createdAt': self.created_at,
        }
