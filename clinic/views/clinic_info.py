from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(['GET'])
@permission_classes([AllowAny])
def clinic_info(request):
    """Public clinic details shown in the site footer and about page."""
    return Response({'ok': True, 'data': dict(settings.CLINIC)})
