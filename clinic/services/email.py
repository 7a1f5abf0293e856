"""E-mail through the configured SMTP relay (Django's mail backend)."""
from __future__ import annotations

import logging
import re
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from clinic.exceptions import ClinicError, NotImplementedProvider, ServiceUnavailable

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def config_status() -> dict:
    return {
        'message': 'Email API is running',
        'provider': settings.EMAIL_PROVIDER,
        'hasSmtpHost': bool(settings.SMTP_HOST),
        'hasSmtpPort': bool(settings.SMTP_PORT),
        'hasSmtpUser': bool(settings.SMTP_USER),
        'hasSmtpPass': bool(settings.SMTP_PASS),
        'hasSmtpFrom': bool(settings.SMTP_FROM),
        'fromEmail': settings.SMTP_FROM or None,
    }


def is_configured() -> bool:
    return all([settings.SMTP_HOST, settings.SMTP_USER, settings.SMTP_PASS, settings.SMTP_FROM])


def send_email(to: str, subject: str, message: str) -> dict:
    if not EMAIL_RE.match(to or ''):
        raise ClinicError("Invalid email address format")
    if settings.EMAIL_PROVIDER != 'smtp':
        raise NotImplementedProvider(f"Email provider '{settings.EMAIL_PROVIDER}' not implemented")
    if not is_configured():
        logger.error("SMTP environment variables not configured")
        raise ServiceUnavailable("Email service not configured")

    logger.info("sending email from %s to %s with subject %r", settings.SMTP_FROM, to, subject)
    message_id = make_msgid(domain=settings.SMTP_FROM.split('@')[-1])
    mail = EmailMultiAlternatives(
        subject=subject,
        body=message,
        from_email=settings.SMTP_FROM,
        to=[to],
        headers={'Message-ID': message_id},
    )
    mail.attach_alternative(message.replace('\n', '<br>'), 'text/html')
    try:
        sent = mail.send()
    except Exception as e:
        logger.error("email to %s failed: %s", to, e)
        raise ServiceUnavailable(f"Email send failed: {e}")
    return {'success': True, 'messageId': message_id, 'response': f"{sent} message(s) accepted"}
