# accounts/services.py

# Import get_user_model from django.contrib.auth because user search queries the custom user model.
from django.contrib.auth import get_user_model
# Import PermissionDenied, ValidationError from django.core.exceptions because views map them to 403 and 400.
from django.core.exceptions import PermissionDenied, ValidationError
# Import Q from django.db.models because searches and friend lookups match several fields.
from django.db.models import Q
# Import Friendship, Status from .models because this module holds the rules for them.
from .models import Friendship, Status

User = get_user_model()


def search_users(query, exclude_user=None, limit=20):
    users = User.objects.filter(is_active=True).filter(
        Q(email__icontains=query) |
        Q(username__icontains=query) |
        Q(first_name__icontains=query) |
        Q(last_name__icontains=query)
    )
    if exclude_user is not None:
        users = users.exclude(pk=exclude_user.pk)
    return list(users.order_by('first_name', 'last_name')[:limit])


def are_friends(user_id_1, user_id_2):
    return Friendship.objects.filter(
        Q(requester_id=user_id_1, addressee_id=user_id_2) |
        Q(requester_id=user_id_2, addressee_id=user_id_1),
        status=Friendship.ACCEPTED,
    ).exists()


def get_friend_ids(user):
    accepted = Friendship.objects.filter(
        Q(requester=user) | Q(addressee=user), status=Friendship.ACCEPTED
    ).values_list('requester_id', 'addressee_id')
    return {other for pair in accepted for other in pair if other != user.pk}


def get_friends(user):
    return list(User.objects.filter(pk__in=get_friend_ids(user)).order_by('first_name', 'last_name'))


def send_friend_request(requester, addressee):
    if requester.pk == addressee.pk:
        raise ValidationError('You cannot send a friend request to yourself.')
    if are_friends(requester.pk, addressee.pk):
        raise ValidationError('You are already friends.')

    # A rejected request may be sent again; anything still pending may not
    existing = Friendship.objects.filter(
        Q(requester=requester, addressee=addressee) | Q(requester=addressee, addressee=requester),
        status=Friendship.PENDING,
    ).first()
    if existing is not None:
        raise ValidationError('A friend request between you is already pending.')

    friendship, _ = Friendship.objects.update_or_create(
        requester=requester, addressee=addressee,
        defaults={'status': Friendship.PENDING},
    )
    return friendship


def get_pending_requests(user):
    return list(
        Friendship.objects.filter(addressee=user, status=Friendship.PENDING).select_related('requester')
    )


def respond_to_friend_request(friendship, user, accept):
    # Only the addressee may answer, and only while the request is pending
    if friendship.addressee_id != user.pk:
        raise PermissionDenied('Only the addressee can respond to this friend request.')
    if friendship.status != Friendship.PENDING:
        raise ValidationError('This friend request has already been answered.')
    friendship.status = Friendship.ACCEPTED if accept else Friendship.REJECTED
    friendship.save(update_fields=['status', 'updated_at'])
    return friendship


def get_status_feed(user, limit=50):
    author_ids = get_friend_ids(user) | {user.pk}
    return list(Status.objects.visible().filter(user_id__in=author_ids)[:limit])
