"""
SMS endpoints: admin dispatch plus the provider webhooks.

The webhooks are public and receive form-encoded callbacks.  Delivery
receipts update the matching dispatch row; inbound replies are handed
to :func:`clinic.services.sms.handle_inbound`.
"""
from __future__ import annotations

import logging

from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.serializers.notify import SmsSendSerializer
from clinic.services import sms as sms_service

logger = logging.getLogger("clinic.sms")


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def sms_send(request):
    s = SmsSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = sms_service.send_sms(s.validated_data['to'], s.validated_data['message'])
    return Response({'ok': True, 'result': result})


def _form(request) -> dict:
    return {k: request.data.get(k) for k in request.data.keys()}


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@parser_classes([FormParser, MultiPartParser, JSONParser])
def sms_webhook(request):
    if request.method == 'GET':
        return Response({'message': 'SMS Webhook endpoint is active', 'timestamp': timezone.now().isoformat()})
    try:
        data = request.data
        message_sid = data.get('MessageSid') or data.get('SmsSid') or ''
        sender = data.get('From') or ''
        to = data.get('To') or ''
        body = data.get('Body') or ''
        status = data.get('MessageStatus') or data.get('SmsStatus') or ''

        # Twilio sends SmsStatus=received on inbound messages as well
        if status and not (body and status == 'received'):
            updated = sms_service.record_status(message_sid, status)
            logger.info("SMS status update sid=%s from=%s to=%s status=%s matched=%d",
                        message_sid, sender, to, status, updated)
        elif body and sender and to:
            logger.info("Incoming SMS from=%s to=%s sid=%s body=%r", sender, to, message_sid, body)
            sms_service.handle_inbound(sender, body)
        else:
            logger.info("Unknown webhook payload: %s", _form(request))
        return Response({'status': 'ok'})
    except Exception:
        logger.exception("SMS webhook error")
        return Response({'error': 'Webhook processing failed'}, status=500)

sms_webhook.cls.throttle_scope = 'sms_webhook'


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@parser_classes([FormParser, MultiPartParser, JSONParser])
def sms_fallback(request):
    if request.method == 'GET':
        return Response({
            'message': 'SMS Fallback webhook endpoint is active',
            'purpose': 'Handles failed primary webhook requests',
            'timestamp': timezone.now().isoformat(),
        })
    try:
        logger.error("SMS webhook fallback triggered, primary webhook may be failing: %s", _form(request))
    except Exception:
        logger.exception("SMS fallback webhook error")
        return Response({'error': 'Fallback webhook processing failed'}, status=500)
    return Response({'status': 'fallback_processed', 'message': 'Fallback webhook received the request'})

sms_fallback.cls.throttle_scope = 'sms_webhook'
