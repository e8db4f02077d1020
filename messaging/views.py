# messaging/views.py

# Import settings from django.conf because the default page size is configurable.
from django.conf import settings
# Import get_user_model from django.contrib.auth because the chat views look up the partner.
from django.contrib.auth import get_user_model
# Import login_required from django.contrib.auth.decorators because every view in this file needs it.
from django.contrib.auth.decorators import login_required
# Import PermissionDenied from django.core.exceptions because 'senderId' must match the session user.
from django.core.exceptions import PermissionDenied
# Import JsonResponse from django.http because these views answer in JSON.
from django.http import JsonResponse
# Import get_object_or_404 from django.shortcuts because unknown rooms and users are a 404.
from django.shortcuts import get_object_or_404
# Import require_GET, require_POST from django.views.decorators.http because each view accepts one method.
from django.views.decorators.http import require_GET, require_POST
# Import async_to_sync from asgiref.sync because read receipts go through the async presence channel.
from asgiref.sync import async_to_sync

# Import the request helpers from core.utils because every JSON view shares them.
from core.utils import api_errors, form_error_response, paginate, parse_json_body
# Import Room from rooms.models because room history needs the room.
from rooms.models import Room
# Import MessageForm from .forms because HTTP and WebSocket messages are validated the same way.
from .forms import MessageForm
# Import deliver_now, get_realtime from .utils because saved messages are pushed to live sockets.
from .utils import deliver_now, get_realtime
# Import the message services because HTTP and WebSocket messages share them.
from .services import (
    create_message, get_conversations, get_direct_messages, get_room_messages, message_to_dict,
)

User = get_user_model()


"""
Saves a message and hands it to the same fanout engine the
WebSocket uses, so a message posted over HTTP reaches live
sockets exactly like one sent over the socket.
RT: The HTTP half of the dual entry path for new messages.
"""
def publish_message(sender, form):
    if form.cleaned_data.get('senderId') not in (None, sender.pk):
        raise PermissionDenied('senderId does not match the logged in user.')
    message = message_to_dict(create_message(sender.pk, **form.message_fields()))
    deliver_now(message)
    return message


@login_required
@require_POST
@api_errors
def send_message_view(request):
    form = MessageForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    message = publish_message(request.user, form)
    return JsonResponse(message, status=201)


@login_required
@require_POST
@api_errors
def send_direct_message_view(request, user_id):
    data = parse_json_body(request).copy()
    data.pop('roomId', None)
    data['recipientId'] = user_id
    form = MessageForm(data)
    if not form.is_valid():
        return form_error_response(form)
    message = publish_message(request.user, form)
    return JsonResponse(message, status=201)


@login_required
@require_POST
@api_errors
def mark_message_read_view(request, message_id):
    message, changed = async_to_sync(get_realtime().presence.mark_message_read)(message_id, request.user.pk)
    return JsonResponse({'message': message, 'changed': changed})


@login_required
@require_POST
@api_errors
def mark_chat_read_view(request, user_id):
    get_object_or_404(User, pk=user_id)
    message_ids = async_to_sync(get_realtime().presence.mark_chat_read)(user_id, request.user.pk)
    return JsonResponse({'messageIds': message_ids})


@login_required
@require_GET
@api_errors
def room_messages_view(request, room_id):
    get_object_or_404(Room, pk=room_id)
    limit, offset = paginate(request, settings.MESSAGE_PAGE_SIZE)
    messages = get_room_messages(room_id, request.user.pk, limit, offset)
    return JsonResponse([message_to_dict(m) for m in messages], safe=False)


@login_required
@require_GET
@api_errors
def direct_messages_view(request, user_id):
    get_object_or_404(User, pk=user_id)
    limit, offset = paginate(request, settings.MESSAGE_PAGE_SIZE)
    messages = get_direct_messages(request.user.pk, user_id, limit, offset)
    return JsonResponse([message_to_dict(m) for m in messages], safe=False)


@login_required
@require_GET
@api_errors
def chat_list_view(request):
    return JsonResponse(get_conversations(request.user.pk), safe=False)


def chat_messages_view(request, user_id):
    # One URL, two verbs: read the history or post into it
    if request.method == 'POST':
        return send_direct_message_view(request, user_id)
    return direct_messages_view(request, user_id)
