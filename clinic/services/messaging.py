"""
Direct messages between patients and clinic admins.

Patients may only write to admins; admins may write to anyone.  New
messages and read receipts are pushed to the conversation's Channels
group so open chat sockets update live.
"""
from __future__ import annotations

import logging
from typing import Optional

import bleach
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from clinic.exceptions import ClinicError, Forbidden, NotFound
from clinic.models import Message, Notification
from clinic.permissions import is_admin
from clinic.services import broadcast, notifications, presence

logger = logging.getLogger(__name__)

User = get_user_model()

MAX_LENGTH = 2000


def serialize(m: Message) -> dict:
    return {
        'id': str(m.id),
        'senderId': m.sender_id,
        'recipientId': m.recipient_id,
        'content': m.content,
        'createdAt': m.created_at.isoformat() if m.created_at else None,
        'readAt': m.read_at.isoformat() if m.read_at else None,
    }


def _display_name(user) -> str:
    return user.display_name()


def get_peer(user, peer_id) -> User:
    try:
        peer = User.objects.select_related('profile').filter(id=int(peer_id)).first()
    except (TypeError, ValueError):
        peer = None
    if peer is None or peer.id == user.id:
        raise NotFound("Conversation partner not found")
    return peer


def can_message(sender, recipient) -> bool:
    if sender.id == recipient.id:
        return False
    return is_admin(sender) or is_admin(recipient)


def contacts(user) -> list[dict]:
    """People the caller can chat with, each with presence and unread count."""
    if is_admin(user):
        window = settings.MESSAGE_CONTACTS_WINDOW
        recent = (
            Message.objects.filter(Q(sender=user) | Q(recipient=user))
            .order_by('-created_at')
            .values_list('sender_id', 'recipient_id')[:window]
        )
        ordered_ids: list[int] = []
        for sender_id, recipient_id in recent:
            other = recipient_id if sender_id == user.id else sender_id
            if other not in ordered_ids:
                ordered_ids.append(other)
        by_id = {u.id: u for u in User.objects.select_related('profile').filter(id__in=ordered_ids)}
        people = [by_id[i] for i in ordered_ids if i in by_id]
    else:
        people = sorted(
            User.objects.select_related('profile').filter(role=User.ROLE_ADMIN, is_active=True),
            key=lambda u: _display_name(u).lower(),
        )

    unread = dict(
        Message.objects.filter(recipient=user, read_at__isnull=True, sender_id__in=[p.id for p in people])
        .values('sender_id').annotate(n=Count('id')).values_list('sender_id', 'n')
    )
    online = presence.online_map([p.id for p in people])
    return [{
        'id': p.id,
        'name': _display_name(p),
        'role': p.role,
        'online': online.get(p.id, False),
        'unread': unread.get(p.id, 0),
    } for p in people]


def thread(user, peer_id) -> list[dict]:
    """Messages between the caller and ``peer_id``, oldest first.

    Unread messages addressed to the caller are marked read.
    """
    peer = get_peer(user, peer_id)
    qs = Message.objects.filter(
        Q(sender=user, recipient=peer) | Q(sender=peer, recipient=user)
    ).order_by('created_at')
    mark_read(user, peer.id)
    return [serialize(m) for m in qs]


def send_message(sender, recipient_id, content: Optional[str]) -> Message:
    recipient = get_peer(sender, recipient_id)
    if not can_message(sender, recipient):
        raise Forbidden("Patients can only message clinic staff")
    content = bleach.clean((content or '').strip(), strip=True)
    if not content:
        raise ClinicError("Message cannot be empty")
    if len(content) > MAX_LENGTH:
        raise ClinicError(f"Message is too long (max {MAX_LENGTH} characters)")

    with transaction.atomic():
        msg = Message.objects.create(sender=sender, recipient=recipient, content=content)
        sender_name = getattr(getattr(sender, 'profile', None), 'full_name', '') or 'a patient'
        notifications.notify(recipient, Notification.TYPE_MESSAGE, {
            'message_id': str(msg.id),
            'from': str(sender.id),
            'full_name': sender_name,
        })

    broadcast.send(broadcast.conversation_group(sender.id, recipient.id), {
        'type': 'message.created',
        'message': serialize(msg),
    })
    return msg


def mark_read(user, peer_id) -> int:
    now = timezone.now()
    qs = Message.objects.filter(sender_id=peer_id, recipient=user, read_at__isnull=True)
    ids = [str(i) for i in qs.values_list('id', flat=True)]
    if not ids:
        return 0
    updated = Message.objects.filter(id__in=ids).update(read_at=now)
    broadcast.send(broadcast.conversation_group(user.id, peer_id), {
        'type': 'message.updated',
        'ids': ids,
        'readAt': now.isoformat(),
        'readerId': user.id,
    })
    return updated
