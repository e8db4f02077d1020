# accounts/views.py

# Import logging because new accounts are logged.
import logging

# Import login, logout, authenticate from django.contrib.auth because the session auth endpoints need them.
from django.contrib.auth import authenticate, login, logout
# Import login_required from django.contrib.auth.decorators because most views in this file need it.
from django.contrib.auth.decorators import login_required
# Import JsonResponse from django.http because these views answer in JSON.
from django.http import JsonResponse
# Import get_token from django.middleware.csrf because 'csrf_view' returns the token in its body.
from django.middleware.csrf import get_token
# Import get_object_or_404 from django.shortcuts because unknown users and requests are a 404.
from django.shortcuts import get_object_or_404
# Import ensure_csrf_cookie because API clients need the CSRF cookie before their first POST.
from django.views.decorators.csrf import ensure_csrf_cookie
# Import the method decorators from django.views.decorators.http because each view limits its methods.
from django.views.decorators.http import require_GET, require_http_methods, require_POST

# Import the request helpers from core.utils because every JSON view shares them.
from core.utils import api_errors, form_error_response, get_online_user_ids, json_error, parse_json_body
# Import notify_now from messaging.utils because friend request views push live notifications.
from messaging.utils import notify_now
# Import the forms from .forms because every request body is validated by one.
from .forms import CustomUserCreationForm, FriendRequestForm, LoginForm, ProfileUpdateForm, StatusForm
# Import Friendship, User from .models because friend requests are looked up by id.
from .models import Friendship, User
# Import services because the friendship rules live there.
from . import services

logger = logging.getLogger(__name__)


# --- Session auth ---

"""
Hands the browser a CSRF cookie (and the same token in the body).
Every POST, PUT and DELETE under /api/ must echo it back in the
X-CSRFToken header.
"""
@require_GET
@ensure_csrf_cookie
def csrf_view(request):
    return JsonResponse({'csrfToken': get_token(request)})


@require_POST
@ensure_csrf_cookie
@api_errors
def register_view(request):
    form = CustomUserCreationForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    user = form.save()
    login(request, user)
    logger.info("New account registered: %s", user.email)
    return JsonResponse(user.to_dict(), status=201)


@require_POST
@ensure_csrf_cookie
@api_errors
def login_view(request):
    form = LoginForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    user = authenticate(request, email=form.cleaned_data['email'].lower(), password=form.cleaned_data['password'])
    if user is None:
        return json_error('Invalid email or password.', status=401)
    login(request, user)
    return JsonResponse(user.to_dict())


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({'success': True})


@login_required
@require_GET
def current_user_view(request):
    return JsonResponse(request.user.to_dict())


# --- Users ---

@login_required
@require_http_methods(['PUT', 'POST'])
@api_errors
def update_profile_view(request):
    data = parse_json_body(request)
    # Only the fields that were sent are changed
    merged = {
        'username': data.get('username', request.user.username) or '',
        'bio': data.get('bio', request.user.bio),
        'status': data.get('status', request.user.status),
    }
    form = ProfileUpdateForm(merged, instance=request.user)
    if not form.is_valid():
        return form_error_response(form)
    user = form.save()
    return JsonResponse(user.to_dict())


@login_required
@require_GET
def search_users_view(request):
    query = request.GET.get('q', '').strip()
    if not query:
        return json_error('Query parameter required')
    users = services.search_users(query, exclude_user=request.user)
    return JsonResponse([u.to_dict() for u in users], safe=False)


"""
Returns the ids of everyone currently shown as online.
RT: Reads the same cached set the presence channel maintains.
"""
@login_required
@require_GET
def online_users_view(request):
    return JsonResponse({'userIds': sorted(get_online_user_ids())})


# --- Friends ---

"""
Sends a friend request and, if the other user has a live
socket, pops up a notification for them straight away.
RT: Sends a real-time notification to the addressee.
"""
@login_required
@require_POST
@api_errors
def send_friend_request_view(request):
    form = FriendRequestForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    addressee = get_object_or_404(User, pk=form.cleaned_data['addresseeId'], is_active=True)
    friendship = services.send_friend_request(request.user, addressee)
    notify_now(addressee.pk, {
        'text': f'{request.user.first_name} sent you a friend request.',
        'friendshipId': friendship.pk,
    })
    return JsonResponse(friendship.to_dict(), status=201)


@login_required
@require_GET
def friend_requests_view(request):
    requests = services.get_pending_requests(request.user)
    return JsonResponse([
        dict(f.to_dict(), requester=f.requester.to_dict()) for f in requests
    ], safe=False)


def _respond(request, friendship_id, accept):
    friendship = get_object_or_404(Friendship, pk=friendship_id)
    friendship = services.respond_to_friend_request(friendship, request.user, accept)
    if accept:
        notify_now(friendship.requester_id, {
            'text': f'{request.user.first_name} accepted your friend request.',
            'friendshipId': friendship.pk,
        })
    return JsonResponse(friendship.to_dict())


@login_required
@require_POST
@api_errors
def accept_friend_request_view(request, friendship_id):
    return _respond(request, friendship_id, accept=True)


@login_required
@require_POST
@api_errors
def reject_friend_request_view(request, friendship_id):
    return _respond(request, friendship_id, accept=False)


@login_required
@require_GET
def friends_view(request):
    return JsonResponse([u.to_dict() for u in services.get_friends(request.user)], safe=False)


# --- Status feed ---

@login_required
@require_POST
@api_errors
def create_status_view(request):
    form = StatusForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    status = form.save(commit=False)
    status.user = request.user
    status.save()
    return JsonResponse(status.to_dict(), status=201)


@login_required
@require_GET
def status_feed_view(request):
    return JsonResponse([s.to_dict() for s in services.get_status_feed(request.user)], safe=False)
