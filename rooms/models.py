# rooms/models.py

# Import models from django.db because this file defines database models.
from django.db import models
# Import settings from django.conf because rooms, members and files link to the User model.
from django.conf import settings
# Import Q from django.db.models because visible files are those that never expire or have not expired yet.
from django.db.models import Q
# Import timezone from django.utils because file expiry is compared against now.
from django.utils import timezone

# Imports for image processing
from PIL import Image
# Import BytesIO from io because resized images are written to memory first.
from io import BytesIO
# Import ContentFile from django.core.files.base because the resized image replaces the upload.
from django.core.files.base import ContentFile
# Import logging because an image that cannot be resized is logged and kept as is.
import logging
# Import os because the resized file gets a .jpg extension.
import os

logger = logging.getLogger(__name__)

"""
This class represents a study room: a named group chat with
its own member list, message stream, subjects and shared files.
The user who creates it is recorded as 'creator' and is added
to the member list automatically (see signals.py).
"""
class Room(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    image_url = models.URLField(blank=True)
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='created_rooms')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'description': self.description,
            'imageUrl': self.image_url,
            'creatorId': self.creator_id,
            'createdAt': self.created_at,
        }

"""
This class links a user to a room. Membership is the
authorization boundary for everything inside a room: reading
and sending messages, joining the room's live channel,
creating subjects and uploading files.
RT: The fanout engine reads this table on every room message
to decide who receives it.
"""
class RoomMember(models.Model):
    CREATOR = 'creator'
    ADMIN = 'admin'
    MEMBER = 'member'
    ROLE_CHOICES = (
        (CREATOR, 'Creator'),
        (ADMIN, 'Admin'),
        (MEMBER, 'Member'),
    )

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='room_memberships')
    role = models.CharField(max_length=7, choices=ROLE_CHOICES, default=MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('room', 'user')

    def __str__(self):
        return f"{self.user} in {self.room} ({self.role})"

    @property
    def can_manage(self):
        return self.role in (self.CREATOR, self.ADMIN)

    def to_dict(self):
        return {
            'id': self.pk,
            'roomId': self.room_id,
            'userId': self.user_id,
            'role': self.role,
            'joinedAt': self.joined_at,
        }


# A Subject groups a room's files by course topic
class Subject(models.Model):
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='subjects')
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def to_dict(self):
        return {'id': self.pk, 'roomId': self.room_id, 'name': self.name, 'createdAt': self.created_at}


# A Subcategory splits a Subject further (e.g. "Lecture notes", "Past exams")
class Subcategory(models.Model):
    subject = models.ForeignKey(Subject, on_delete=models.CASCADE, related_name='subcategories')
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'subcategories'

    def __str__(self):
        return f"{self.subject.name} / {self.name}"

    def to_dict(self):
        return {'id': self.pk, 'subjectId': self.subject_id, 'name': self.name, 'createdAt': self.created_at}


class SharedFileQuerySet(models.QuerySet):
    def visible(self):
        now = timezone.now()
        return self.filter(is_deleted=False).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


"""
This class represents a file uploaded into a room and filed
under a subject and, optionally, a subcategory. Deleting a
file only flags it, so messages that point at it keep working.
Large images are scaled down before they are stored.
"""
class SharedFile(models.Model):
    original_name = models.CharField(max_length=255)
    file_name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100)
    file_size = models.PositiveBigIntegerField()
    file = models.FileField(upload_to='room_files/')
    uploader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='files')
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='files', blank=True, null=True)
    subject = models.ForeignKey(Subject, on_delete=models.SET_NULL, related_name='files', blank=True, null=True)
    subcategory = models.ForeignKey(Subcategory, on_delete=models.SET_NULL, related_name='files', blank=True, null=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)
    expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = SharedFileQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.file_name

    def to_dict(self):
        return {
            'id': self.pk,
            'originalName': self.original_name,
            'fileName': self.file_name,
            'fileType': self.file_type,
            'fileSize': self.file_size,
            'url': self.file.url if self.file else None,
            'uploaderId': self.uploader_id,
            'roomId': self.room_id,
            'subjectId': self.subject_id,
            'subcategoryId': self.subcategory_id,
            'createdAt': self.created_at,
        }

    # Optimization: Auto-resize image uploads before saving
    def save(self, *args, **kwargs):
        if self._state.adding and self.file and self.file_type.startswith('image/'):
            # We need to ensure the file pointer is at the start before we do anything
            if hasattr(self.file, 'seek'):
                self.file.seek(0)

            try:
                img = Image.open(self.file)

                # Convert to RGB if it's not (e.g. PNG with alpha) to save as JPEG
                if img.mode != 'RGB':
                    img = img.convert('RGB')

                max_size = (2048, 2048)

                # Resize only if larger than max_size
                if img.height > max_size[1] or img.width > max_size[0]:
                    img.thumbnail(max_size, Image.Resampling.LANCZOS)

                    output = BytesIO()
                    img.save(output, format='JPEG', quality=80)
                    output.seek(0)

                    # The extension changes to .jpg since we converted to JPEG
                    new_name = os.path.splitext(self.file.name)[0] + '.jpg'
                    content = output.read()
                    self.file = ContentFile(content, name=new_name)
                    self.file_type = 'image/jpeg'
                    self.file_size = len(content)
                elif hasattr(self.file, 'seek'):
                    # Image.open() may have read from the file
                    self.file.seek(0)

            except (OSError, ValueError) as e:
                logger.warning("Could not optimize image %s: %s", self.original_name, e)
                # Save the original untouched
                if hasattr(self.file, 'seek'):
                    self.file.seek(0)

        super().save(*args, **kwargs)
