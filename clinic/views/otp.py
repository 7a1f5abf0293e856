"""Phone verification endpoints."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.exceptions import ClinicError
from clinic.serializers.notify import OtpVerifySerializer
from clinic.services import otp
from clinic.services.audit import safe_log_action


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def otp_start(request):
    phone = request.data.get('phone')
    if not phone or not isinstance(phone, str) or not phone.strip():
        raise ClinicError("Invalid phone")
    otp.start_verification(request.user, phone.strip())
    return Response({'ok': True})

otp_start.cls.throttle_scope = 'otp'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def otp_verify(request):
    s = OtpVerifySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    phone = s.validated_data['phone']
    otp.verify_code(request.user, phone, s.validated_data['code'])
    safe_log_action(user=request.user, action='otp_verify', object_type='user', object_id=request.user.id,
                    detail={'phone': phone})
    return Response({'ok': True, 'phone': phone})

otp_verify.cls.throttle_scope = 'otp'
