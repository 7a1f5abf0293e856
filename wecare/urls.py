"""
Root URL configuration for the WeCare clinic backend.

The clinic app owns every API route; the Django admin and the generated
OpenAPI documentation (``/swagger/`` and ``/redoc/``) are mounted here.
Uploaded avatars are served from ``MEDIA_URL`` while ``DEBUG`` is on.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

api_info = openapi.Info(
    title="WeCare Clinic API",
    default_version='v1',
    description="Appointment booking, triage, inventory, messaging and SMS/OTP services for WeCare Clinic.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('clinic.routers')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
