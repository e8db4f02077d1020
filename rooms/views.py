# rooms/views.py

# Import get_user_model from django.contrib.auth because members are added by user id.
from django.contrib.auth import get_user_model
# Import login_required from django.contrib.auth.decorators because every view in this file needs it.
from django.contrib.auth.decorators import login_required
# Import HttpResponse, JsonResponse from django.http because deletes answer 204 and the rest answer JSON.
from django.http import HttpResponse, JsonResponse
# Import get_object_or_404 from django.shortcuts because rooms, subjects and files are looked up by id.
from django.shortcuts import get_object_or_404
# Import transaction from django.db because a new member and the announcement are saved together.
from django.db import transaction
# Import the method decorators from django.views.decorators.http because each view limits its methods.
from django.views.decorators.http import require_GET, require_http_methods, require_POST

# Import the request helpers from core.utils because every JSON view shares them.
from core.utils import api_errors, form_error_response, parse_json_body
# Import Message from messaging.models because adding a member posts a system message.
from messaging.models import Message
# Import create_message, message_to_dict from messaging.services because the announcement is a normal room message.
from messaging.services import create_message, message_to_dict
# Import deliver_now, notify_now from messaging.utils because room changes are pushed to live sockets.
from messaging.utils import deliver_now, notify_now
# Import the forms from .forms because every request body is validated by one.
from .forms import AddMemberForm, FileUploadForm, NameForm, RoomForm
# Import the room models from .models because these views read and write them.
from .models import Room, RoomMember, Subject, Subcategory, SharedFile
# Import services because the membership rules live there.
from . import services

User = get_user_model()


def _optional_int(value):
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# Lists the user's rooms, or creates a new one (the creator joins automatically)
@login_required
@require_http_methods(['GET', 'POST'])
@api_errors
def rooms_view(request):
    if request.method == 'POST':
        data = parse_json_body(request)
        form = RoomForm(data)
        if not form.is_valid():
            return form_error_response(form)
        room = services.create_room(
            request.user, form.cleaned_data['name'],
            description=form.cleaned_data['description'],
            image_url=form.cleaned_data.get('imageUrl') or '',
        )
        return JsonResponse(room.to_dict(), status=201)

    rooms = services.get_user_rooms(request.user)
    return JsonResponse([room.to_dict() for room in rooms], safe=False)


@login_required
@require_GET
@api_errors
def room_detail_view(request, room_id):
    room = get_object_or_404(Room, pk=room_id)
    membership = services.require_membership(room, request.user)
    data = room.to_dict()
    data['role'] = membership.role
    data['memberCount'] = room.members.count()
    return JsonResponse(data)


"""
Lists a room's members, or adds a new one. Adding a member
posts a 'system' message into the room and pushes it to every
member's live socket, then sends the new member a notification.
RT: Fans out through the same engine as chat messages.
"""
@login_required
@require_http_methods(['GET', 'POST'])
@api_errors
def room_members_view(request, room_id):
    room = get_object_or_404(Room, pk=room_id)

    if request.method == 'POST':
        form = AddMemberForm(parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        new_user = get_object_or_404(User, pk=form.cleaned_data['userId'], is_active=True)
        # The member and the announcement are saved together or not at all
        with transaction.atomic():
            member = services.add_room_member(room, request.user, new_user, role=form.cleaned_data['role'])
            announcement = create_message(
                request.user.pk,
                content=f"{request.user.first_name} added {new_user.first_name} to the room.",
                room_id=room.pk,
                message_type=Message.SYSTEM,
            )
        deliver_now(message_to_dict(announcement))
        notify_now(new_user.pk, {
            'text': f'{request.user.first_name} added you to {room.name}.',
            'roomId': room.pk,
        })
        return JsonResponse(member.to_dict(), status=201)

    services.require_membership(room, request.user)
    members = RoomMember.objects.filter(room=room).select_related('user').order_by('joined_at')
    return JsonResponse([
        dict(member.to_dict(), user=member.user.to_dict()) for member in members
    ], safe=False)


@login_required
@require_http_methods(['DELETE', 'POST'])
@api_errors
def remove_room_member_view(request, room_id, user_id):
    room = get_object_or_404(Room, pk=room_id)
    services.remove_room_member(room, request.user, user_id)
    return HttpResponse(status=204)


@login_required
@require_http_methods(['GET', 'POST'])
@api_errors
def room_subjects_view(request, room_id):
    room = get_object_or_404(Room, pk=room_id)

    if request.method == 'POST':
        form = NameForm(parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        subject = services.create_subject(room, request.user, form.cleaned_data['name'])
        return JsonResponse(subject.to_dict(), status=201)

    services.require_membership(room, request.user)
    return JsonResponse([s.to_dict() for s in room.subjects.order_by('name')], safe=False)


@login_required
@require_http_methods(['GET', 'POST'])
@api_errors
def subject_subcategories_view(request, subject_id):
    subject = get_object_or_404(Subject.objects.select_related('room'), pk=subject_id)

    if request.method == 'POST':
        form = NameForm(parse_json_body(request))
        if not form.is_valid():
            return form_error_response(form)
        subcategory = services.create_subcategory(subject, request.user, form.cleaned_data['name'])
        return JsonResponse(subcategory.to_dict(), status=201)

    services.require_membership(subject.room, request.user)
    return JsonResponse([s.to_dict() for s in subject.subcategories.order_by('name')], safe=False)


@login_required
@require_POST
@api_errors
def upload_file_view(request):
    form = FileUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return form_error_response(form)
    data = form.cleaned_data

    room = get_object_or_404(Room, pk=data['roomId']) if data.get('roomId') else None
    subject = get_object_or_404(Subject, pk=data['subjectId']) if data.get('subjectId') else None
    subcategory = get_object_or_404(Subcategory, pk=data['subcategoryId']) if data.get('subcategoryId') else None

    shared_file = services.save_uploaded_file(
        request.user, data['file'], file_name=data.get('fileName') or '',
        room=room, subject=subject, subcategory=subcategory,
    )
    return JsonResponse(shared_file.to_dict(), status=201)


@login_required
@require_GET
@api_errors
def room_files_view(request, room_id):
    room = get_object_or_404(Room, pk=room_id)
    services.require_membership(room, request.user)
    files = services.get_room_files(
        room,
        subject_id=_optional_int(request.GET.get('subjectId')),
        subcategory_id=_optional_int(request.GET.get('subcategoryId')),
    )
    return JsonResponse([f.to_dict() for f in files], safe=False)


@login_required
@require_GET
@api_errors
def search_files_view(request):
    query = request.GET.get('q', '').strip()
    if not query:
        return JsonResponse({'message': 'Query parameter required'}, status=400)
    return JsonResponse([f.to_dict() for f in services.search_files(query, request.user)], safe=False)


@login_required
@require_http_methods(['DELETE'])
@api_errors
def delete_file_view(request, file_id):
    shared_file = get_object_or_404(SharedFile, pk=file_id, is_deleted=False)
    services.delete_file(shared_file, request.user)
    return HttpResponse(status=204)
