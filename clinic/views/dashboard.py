"""
Administrative dashboard endpoint.

Summarises appointment volume, inventory levels and how far patients
are through the three-dose schedule.  The summary is cached for
``DASHBOARD_CACHE_SECONDS``; pass ``?refresh=1`` to rebuild it.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.services import dashboard


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_dashboard(request):
    refresh = (request.query_params.get('refresh') or '0') in ['1', 'true', 'True']
    return Response({'ok': True, 'data': dashboard.get_summary(refresh=refresh)})
