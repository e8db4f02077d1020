# rooms/services.py

# Import settings from django.conf because the upload size limit is configurable.
from django.conf import settings
# Import PermissionDenied, ValidationError from django.core.exceptions because views map them to 403 and 400.
from django.core.exceptions import PermissionDenied, ValidationError
# Import Q from django.db.models because file search matches several fields.
from django.db.models import Q
# Import timezone from django.utils because soft deletes are stamped here.
from django.utils import timezone
# Import the room models from .models because this module holds the rules for them.
from .models import Room, RoomMember, Subject, Subcategory, SharedFile


def is_room_member(room_id, user_id):
    return RoomMember.objects.filter(room_id=room_id, user_id=user_id).exists()


def get_room_member_ids(room_id):
    return list(RoomMember.objects.filter(room_id=room_id).values_list('user_id', flat=True))


def require_membership(room, user):
    # Raises instead of returning False so views can map it straight to a 403
    membership = RoomMember.objects.filter(room=room, user=user).first()
    if membership is None:
        raise PermissionDenied('You are not a member of this room.')
    return membership


def get_user_rooms(user):
    return list(Room.objects.filter(members__user=user).order_by('-updated_at').distinct())


def create_room(creator, name, description='', image_url=''):
    # The creator's membership row is added by rooms.signals
    return Room.objects.create(creator=creator, name=name, description=description, image_url=image_url)


def add_room_member(room, acting_user, new_user, role=RoomMember.MEMBER):
    membership = require_membership(room, acting_user)
    if not membership.can_manage:
        raise PermissionDenied('Only the room creator or an admin can add members.')
    if role == RoomMember.CREATOR:
        raise ValidationError('A room has exactly one creator.')
    member, created = RoomMember.objects.get_or_create(room=room, user=new_user, defaults={'role': role})
    if not created:
        raise ValidationError('This user is already a member of the room.')
    return member


def remove_room_member(room, acting_user, user_id):
    target = RoomMember.objects.filter(room=room, user_id=user_id).first()
    if target is None:
        raise ValidationError('This user is not a member of the room.')
    if target.role == RoomMember.CREATOR:
        raise ValidationError('The room creator cannot be removed.')
    # Members may always leave; removing someone else needs a manager
    if acting_user.pk != user_id:
        membership = require_membership(room, acting_user)
        if not membership.can_manage:
            raise PermissionDenied('Only the room creator or an admin can remove members.')
    target.delete()


def create_subject(room, user, name):
    require_membership(room, user)
    return Subject.objects.create(room=room, name=name)


def create_subcategory(subject, user, name):
    require_membership(subject.room, user)
    return Subcategory.objects.create(subject=subject, name=name)


def save_uploaded_file(uploader, upload, file_name='', room=None, subject=None, subcategory=None):
    if upload.size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError('File is larger than the upload limit.')
    if subcategory is not None and subject is None:
        subject = subcategory.subject
    if subject is not None and room is None:
        room = subject.room
    if subcategory is not None and subcategory.subject_id != subject.pk:
        raise ValidationError('Subcategory does not belong to the given subject.')
    if subject is not None and subject.room_id != room.pk:
        raise ValidationError('Subject does not belong to the given room.')
    if room is not None:
        require_membership(room, uploader)

    return SharedFile.objects.create(
        original_name=upload.name,
        file_name=file_name or upload.name,
        file_type=upload.content_type or 'application/octet-stream',
        file_size=upload.size,
        file=upload,
        uploader=uploader,
        room=room,
        subject=subject,
        subcategory=subcategory,
    )


def get_room_files(room, subject_id=None, subcategory_id=None):
    files = SharedFile.objects.visible().filter(room=room)
    if subject_id is not None:
        files = files.filter(subject_id=subject_id)
    if subcategory_id is not None:
        files = files.filter(subcategory_id=subcategory_id)
    return list(files)


def search_files(query, user, limit=50):
    # Searches the user's own uploads and every room they belong to
    return list(
        SharedFile.objects.visible()
        .filter(Q(uploader=user) | Q(room__members__user=user))
        .filter(Q(file_name__icontains=query) | Q(original_name__icontains=query))
        .distinct()[:limit]
    )


def delete_file(shared_file, user):
    if shared_file.uploader_id != user.pk:
        raise PermissionDenied('Only the uploader can delete this file.')
    shared_file.is_deleted = True
    shared_file.deleted_at = timezone.now()
    shared_file.save(update_fields=['is_deleted', 'deleted_at'])
