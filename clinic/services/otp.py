"""Phone verification by one-time SMS code."""
from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from clinic.exceptions import ClinicError, ServiceUnavailable
from clinic.models import PhoneVerification, Profile
from clinic.services.sms import send_sms

logger = logging.getLogger(__name__)


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def start_verification(user, phone: str) -> PhoneVerification:
    """Store a fresh code and text it to ``phone``."""
    code = generate_code()
    verification = PhoneVerification.objects.create(
        user=user,
        phone=phone,
        code=code,
        expires_at=timezone.now() + timedelta(minutes=settings.OTP_TTL_MINUTES),
    )
    try:
        send_sms(phone, f"WeCare verification code: {code}")
    except ServiceUnavailable as e:
        raise ServiceUnavailable(f"SMS send failed: {e.message}")
    return verification


@transaction.atomic
def verify_code(user, phone: str, code: str) -> PhoneVerification:
    now = timezone.now()
    verification = (
        PhoneVerification.objects.select_for_update()
        .filter(user=user, phone=phone, code=code, consumed_at__isnull=True, expires_at__gt=now)
        .order_by('-created_at')
        .first()
    )
    if verification is None:
        raise ClinicError("Invalid or expired code")
    verification.consumed_at = now
    verification.save(update_fields=['consumed_at'])
    profile, _ = Profile.objects.get_or_create(user=user)
    profile.phone = phone
    profile.save(update_fields=['phone', 'updated_at'])
    logger.info("phone %s verified for user %s", phone, user.pk)
    return verification


def purge(older_than_hours: int = 24) -> int:
    """Delete consumed or expired codes older than the cutoff."""
    cutoff = timezone.now() - timedelta(hours=older_than_hours)
    qs = PhoneVerification.objects.filter(created_at__lt=cutoff).filter(
        Q(consumed_at__isnull=False) | Q(expires_at__lt=timezone.now())
    )
    deleted, _ = qs.delete()
    return deleted
