# config/urls.py

# Import admin from django.contrib because the admin site stays mounted.
from django.contrib import admin
# Import path, include from django.urls because each app brings its own URL list.
from django.urls import path, include
# Import settings from django.conf because media files are only served in DEBUG.
from django.conf import settings
# Import HttpResponse from django.http because '/healthz/' answers in plain text.
from django.http import HttpResponse
# Import static from django.conf.urls.static because it serves uploads during development.
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls),
    path('healthz/', lambda r: HttpResponse("ok", content_type="text/plain")),

    # App URLs
    path('api/', include('accounts.urls')),
    path('api/', include('rooms.urls')),
    path('api/', include('messaging.urls')),
]

# Local media serving
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
