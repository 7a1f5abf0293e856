"""
Messaging endpoints between patients and clinic staff.

The HTTP routes cover listing and sending; live updates for an open
conversation arrive over ``ws/messages/<peer_id>/``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.serializers.messaging import MessageSendSerializer, PeerSerializer
from clinic.services import messaging


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def message_contacts(request):
    return Response({'ok': True, 'data': messaging.contacts(request.user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def message_thread(request):
    q = PeerSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': messaging.thread(request.user, q.validated_data['peer'])})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def message_send(request):
    s = MessageSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    msg = messaging.send_message(request.user, s.validated_data['recipientId'], s.validated_data['content'])
    return Response({'ok': True, 'data': messaging.serialize(msg)}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def message_read(request):
    s = PeerSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    updated = messaging.mark_read(request.user, s.validated_data['peer'])
    return Response({'ok': True, 'updated': updated})
