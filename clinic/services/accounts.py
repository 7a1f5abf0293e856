"""
Account helpers: registration, profiles and password reset.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.db import transaction
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from clinic.exceptions import ClinicError, Conflict
from clinic.models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()

PROFILE_FIELDS = ('full_name', 'address', 'birthday', 'contact_number', 'sex')


def home_path(user) -> str:
    return '/dashboard/admin' if getattr(user, 'role', None) == User.ROLE_ADMIN else '/dashboard/patient'


def ensure_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


def _check_password(password: str, user=None) -> None:
    try:
        validate_password(password, user=user)
    except ValidationError as e:
        raise ClinicError(e.messages[0], fields={'password': e.messages})


@transaction.atomic
def register(*, email: str, password: str, full_name: str = '', contact_number: str = '',
             address: str = '', birthday=None, sex: str = '') -> User:
    email = email.strip().lower()
    if User.objects.filter(username__iexact=email).exists() or User.objects.filter(email__iexact=email).exists():
        raise Conflict("An account with this email already exists")
    user = User(username=email, email=email, role=User.ROLE_PATIENT, first_name=full_name[:150])
    _check_password(password, user)
    user.set_password(password)
    user.save()
    Profile.objects.create(
        user=user,
        full_name=full_name,
        contact_number=contact_number,
        address=address,
        birthday=birthday,
        sex=sex,
    )
    logger.info("registered patient %s", user.id)
    return user


def find_login_user(identifier: str):
    """Resolve an email or username to a user (case-insensitive)."""
    identifier = (identifier or '').strip()
    if not identifier:
        return None
    user = User.objects.filter(username__iexact=identifier).first()
    if user is None and '@' in identifier:
        user = User.objects.filter(email__iexact=identifier).first()
    return user


def update_profile(user, data: dict) -> Profile:
    profile = ensure_profile(user)
    changed = []
    for field in PROFILE_FIELDS:
        if field in data:
            setattr(profile, field, data[field])
            changed.append(field)
    if changed:
        profile.save(update_fields=[*changed, 'updated_at'])
    user_fields = []
    if 'email' in data and data['email'] != user.email:
        email = data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exclude(id=user.id).exists():
            raise Conflict("An account with this email already exists")
        user.email = email
        user_fields.append('email')
    if 'full_name' in data:
        user.first_name = (data['full_name'] or '')[:150]
        user_fields.append('first_name')
    if user_fields:
        user.save(update_fields=user_fields)
    return profile


def profile_payload(user, request=None) -> dict:
    profile = ensure_profile(user)
    avatar_url = None
    if profile.avatar:
        avatar_url = profile.avatar.url
        if request is not None:
            avatar_url = request.build_absolute_uri(avatar_url)
    return {
        'id': user.id,
        'email': user.email,
        'role': user.role,
        'fullName': profile.full_name,
        'phone': profile.phone,
        'contactNumber': profile.contact_number,
        'address': profile.address,
        'birthday': profile.birthday.isoformat() if profile.birthday else None,
        'sex': profile.sex,
        'avatarUrl': avatar_url,
        'smsOptOut': profile.sms_opt_out,
    }


def save_avatar(user, upload) -> Profile:
    size_mb = (upload.size or 0) / (1024 * 1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise ClinicError(f"File too large (max {settings.UPLOAD_MAX_MB} MB)")
    ctype = getattr(upload, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise ClinicError("Unsupported file type")
    profile = ensure_profile(user)
    old = profile.avatar.name if profile.avatar else None
    profile.avatar.save(upload.name, upload, save=False)
    profile.save(update_fields=['avatar', 'updated_at'])
    if old and old != profile.avatar.name:
        profile.avatar.storage.delete(old)
    return profile


def send_password_reset(email: str) -> bool:
    """Mail a reset link when the address belongs to an active user."""
    user = User.objects.filter(email__iexact=(email or '').strip(), is_active=True).first()
    if user is None:
        return False
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    link = f"{settings.SITE_URL}/auth/reset-password?uid={uid}&token={token}"
    send_mail(
        subject=f"{settings.CLINIC['name']} password reset",
        message=f"Use the link below to set a new password:\n\n{link}\n\nIgnore this e-mail if you did not ask for it.",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )
    logger.info("password reset mailed to user %s", user.id)
    return True


def reset_password(uid: str, token: str, password: str) -> User:
    try:
        user = User.objects.filter(pk=force_str(urlsafe_base64_decode(uid))).first()
    except (TypeError, ValueError, OverflowError):
        user = None
    if user is None or not default_token_generator.check_token(user, token):
        raise ClinicError("Invalid or expired reset link")
    _check_password(password, user)
    user.set_password(password)
    user.save(update_fields=['password'])
    return user


def change_password(user, password: str) -> None:
    _check_password(password, user)
    user.set_password(password)
    user.save(update_fields=['password'])
