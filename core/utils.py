# core/utils.py

# Import json because API request bodies arrive as JSON text.
import json
# Import logging because database errors in views are logged with their traceback.
import logging
# Import wraps from functools because 'api_errors' is a view decorator.
from functools import wraps
# Import cache from django.core.cache because the online user set is kept in the cache.
from django.core.cache import cache
# Import the exceptions from django.core.exceptions because API errors are mapped from them.
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
# Import DatabaseError from django.db because 'api_errors' turns it into a 500.
from django.db import DatabaseError
# Import JsonResponse from django.http because every API error is answered with JSON.
from django.http import Http404, JsonResponse

logger = logging.getLogger(__name__)

# This is the "key" used to store and retrieve the list of online users from the cache.
ONLINE_USERS_CACHE_KEY = 'online_users'

"""
This is a simple helper function used by the API and the
presence channel. Its only job is to quickly get the set of
all currently online users from the server's memory (cache).
RT: This function is the central source for all real-time
"who is online" data.
"""
def get_online_user_ids():
    return cache.get(ONLINE_USERS_CACHE_KEY, set())


"""
Adds or removes a user id from the cached online set.
Returns True when the set actually changed.
RT: Called by the presence channel when a socket authenticates
or when the offline grace period runs out.
"""
def set_user_online(user_id, is_online):
    online_ids = cache.get(ONLINE_USERS_CACHE_KEY, set())
    was_online = user_id in online_ids
    if is_online:
        online_ids.add(user_id)
    else:
        online_ids.discard(user_id)
    cache.set(ONLINE_USERS_CACHE_KEY, online_ids, timeout=None)
    return was_online != is_online


def parse_json_body(request):
    # Form-encoded and multipart requests are read from request.POST
    if request.content_type != 'application/json':
        return request.POST
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise ValidationError('Request body is not valid JSON.')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def json_error(message, status=400, **extra):
    payload = {'message': message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def form_error_response(form):
    return JsonResponse({'message': 'Invalid request.', 'errors': form.errors.get_json_data()}, status=400)


def paginate(request, default_limit):
    try:
        limit = int(request.GET.get('limit', default_limit))
        offset = int(request.GET.get('offset', 0))
    except ValueError:
        raise ValidationError('limit and offset must be integers.')
    if limit < 1 or offset < 0:
        raise ValidationError('limit must be positive and offset cannot be negative.')
    return min(limit, 200), offset


"""
Wraps an API view so the usual service-layer exceptions come
back as JSON with the right status code instead of Django's
HTML error pages. Database errors are logged with a traceback.
"""
def api_errors(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ValidationError as e:
            return json_error(' '.join(e.messages), status=400)
        except PermissionDenied as e:
            return json_error(str(e) or 'Forbidden.', status=403)
        except (ObjectDoesNotExist, Http404) as e:
            return json_error(str(e) or 'Not found.', status=404)
        except DatabaseError:
            logger.exception("Database error in %s", view.__name__)
            return json_error('The server could not complete the request.', status=500)
    return wrapper
