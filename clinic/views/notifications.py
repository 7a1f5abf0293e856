from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.pagination import page_params
from clinic.services import notifications


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    page, page_size = page_params(request)
    data, total = notifications.list_notifications(request.user, page=page, page_size=page_size)
    return Response({
        'ok': True,
        'data': data,
        'unread': notifications.unread_count(request.user),
        'pagination': {'total': total, 'page': page, 'pageSize': page_size},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'ok': True, 'count': notifications.unread_count(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read_all(request):
    updated = notifications.mark_all_read(request.user)
    return Response({'ok': True, 'updated': updated})
