"""
Outbound SMS through Twilio or Vonage.

The provider is picked by ``SMS_PROVIDER``.  Every attempt is recorded
as an :class:`~clinic.models.SmsDispatch` row so delivery receipts from
the webhook can be matched back by ``provider_message_id``.
"""
from __future__ import annotations

import logging

import requests
from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from clinic.exceptions import Conflict, ServiceUnavailable
from clinic.models import Notification, Profile, SmsDispatch
from clinic.services.notifications import notify_admins

logger = logging.getLogger(__name__)

TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
VONAGE_URL = "https://rest.nexmo.com/sms/json"


class SmsConfigError(ServiceUnavailable):
    pass


class SmsSendError(ServiceUnavailable):
    pass


def _send_twilio(to: str, message: str) -> tuple[dict, str]:
    sid = settings.TWILIO_ACCOUNT_SID
    token = settings.TWILIO_AUTH_TOKEN
    sender = settings.TWILIO_FROM
    if not sid or not token or not sender:
        raise SmsConfigError("Twilio env vars missing")
    try:
        resp = requests.post(
            TWILIO_URL.format(sid=sid),
            data={'To': to, 'From': sender, 'Body': message},
            auth=(sid, token),
            timeout=settings.SMS_TIMEOUT,
        )
    except requests.RequestException as e:
        raise SmsSendError(str(e))
    if not resp.ok:
        raise SmsSendError(resp.text or f"Twilio HTTP {resp.status_code}")
    result = resp.json()
    return result, str(result.get('sid') or '')


def _send_vonage(to: str, message: str) -> tuple[dict, str]:
    api_key = settings.VONAGE_API_KEY
    api_secret = settings.VONAGE_API_SECRET
    sender = settings.VONAGE_FROM
    if not api_key or not api_secret or not sender:
        raise SmsConfigError("Vonage env vars missing")
    try:
        resp = requests.post(
            VONAGE_URL,
            json={'api_key': api_key, 'api_secret': api_secret, 'to': to, 'from': sender, 'text': message},
            timeout=settings.SMS_TIMEOUT,
        )
    except requests.RequestException as e:
        raise SmsSendError(str(e))
    if not resp.ok:
        raise SmsSendError(resp.text or f"Vonage HTTP {resp.status_code}")
    result = resp.json()
    # Vonage answers 200 even when the message was rejected
    messages = result.get('messages') or []
    first = messages[0] if messages else {}
    if str(first.get('status', '0')) != '0':
        raise SmsSendError(first.get('error-text') or f"Vonage status {first.get('status')}")
    return result, str(first.get('message-id') or '')


def send_sms(to: str, message: str) -> dict:
    """Send one SMS and return the provider's JSON response.

    Raises :class:`SmsConfigError` when the provider credentials are
    missing and :class:`SmsSendError` when the provider rejects the
    message.  Either way a failed ``SmsDispatch`` row is kept.
    """
    provider = (settings.SMS_PROVIDER or 'twilio').lower()
    sender = _send_vonage if provider == 'vonage' else _send_twilio
    provider = 'vonage' if provider == 'vonage' else 'twilio'
    try:
        result, message_id = sender(to, message)
    except ServiceUnavailable as e:
        logger.warning("sms to %s via %s failed: %s", to, provider, e.message)
        SmsDispatch.objects.create(
            to=to, body=message, provider=provider, status=SmsDispatch.STATUS_FAILED, error=e.message,
        )
        raise
    SmsDispatch.objects.create(
        to=to, body=message, provider=provider, provider_message_id=message_id, status=SmsDispatch.STATUS_SENT,
    )
    logger.info("sms sent to %s via %s (%s)", to, provider, message_id or '-')
    return result


def ensure_not_opted_out(to: str, user_id=None) -> None:
    """Refuse to text a patient who replied STOP, by account or by number."""
    match = Q(phone=to) | Q(contact_number=to)
    if user_id is not None:
        match |= Q(user_id=user_id)
    if Profile.objects.filter(match, sms_opt_out=True).exists():
        logger.warning("sms to %s skipped: patient opted out", to)
        raise Conflict("Patient has opted out of SMS")


def record_status(message_id: str, status: str) -> int:
    """Store a delivery receipt; returns the number of dispatches updated."""
    if not message_id:
        return 0
    return SmsDispatch.objects.filter(provider_message_id=message_id).update(
        status=status[:24], updated_at=timezone.now(),
    )


def handle_inbound(sender: str, body: str) -> str:
    """Act on an SMS reply from a patient.

    ``STOP`` opts every profile with that number out of SMS.  Any other
    reply from a known number is forwarded to the admins as a
    ``message`` notification.  Returns ``stop``, ``forwarded`` or
    ``ignored``.
    """
    matches = Profile.objects.filter(Q(phone=sender) | Q(contact_number=sender)).select_related('user')
    if (body or '').strip().upper() == 'STOP':
        updated = matches.update(sms_opt_out=True)
        logger.info("patient %s requested to stop SMS (%d profiles)", sender, updated)
        return 'stop'
    profile = matches.first()
    if profile is None:
        logger.info("inbound sms from unknown number %s", sender)
        return 'ignored'
    notify_admins(Notification.TYPE_MESSAGE, {
        'source': 'sms',
        'from': str(profile.user_id),
        'full_name': profile.full_name or 'a patient',
        'phone': sender,
        'body': body[:500],
    })
    return 'forwarded'
