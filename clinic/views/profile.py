"""
Profile endpoints for the signed-in user.

``phone`` is deliberately not editable here; it changes only through
the OTP verification flow.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.serializers.profile import AvatarUploadSerializer, ProfileUpdateSerializer
from clinic.services import accounts


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def profile(request):
    if request.method == 'POST':
        s = ProfileUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        accounts.update_profile(request.user, s.validated_data)
    return Response({'ok': True, 'data': accounts.profile_payload(request.user, request)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def profile_avatar(request):
    s = AvatarUploadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.save_avatar(request.user, s.validated_data['avatar'])
    payload = accounts.profile_payload(request.user, request)
    return Response({'ok': True, 'avatar_url': payload['avatarUrl'], 'data': payload})
