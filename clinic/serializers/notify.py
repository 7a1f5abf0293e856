"""Payloads for the outbound SMS, e-mail and OTP endpoints."""
from rest_framework import serializers


class SmsSendSerializer(serializers.Serializer):
    to = serializers.CharField(error_messages={'required': 'Missing to or message', 'blank': 'Missing to or message'})
    message = serializers.CharField(
        error_messages={'required': 'Missing to or message', 'blank': 'Missing to or message'},
    )


class PatientSmsSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True)


class EmailSendSerializer(serializers.Serializer):
    _missing = 'Missing required fields: to, subject, and message'

    to = serializers.CharField(error_messages={'required': _missing, 'blank': _missing})
    subject = serializers.CharField(error_messages={'required': _missing, 'blank': _missing})
    message = serializers.CharField(trim_whitespace=False, error_messages={'required': _missing, 'blank': _missing})


class OtpVerifySerializer(serializers.Serializer):
    phone = serializers.CharField(error_messages={'required': 'Missing phone or code', 'blank': 'Missing phone or code'})
    code = serializers.CharField(error_messages={'required': 'Missing phone or code', 'blank': 'Missing phone or code'})
