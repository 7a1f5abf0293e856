"""
In-app notifications.

Rows are written by the other services as side effects of appointment,
vaccination and message changes.  Each write pushes the recipient's new
unread count to their ``user.<id>`` group once the write commits.
"""
from __future__ import annotations

from typing import Iterable

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic.models import Notification
from clinic.services import broadcast

User = get_user_model()


def unread_count(user) -> int:
    return Notification.objects.filter(user=user, read_at__isnull=True).count()


def push_unread(user_id) -> None:
    """Send the fresh unread count after the current transaction commits."""
    def push():
        count = Notification.objects.filter(user_id=user_id, read_at__isnull=True).count()
        broadcast.send(broadcast.user_group(user_id), {"type": "notification.unread", "count": count})
    transaction.on_commit(push)


def notify(user, type: str, payload: dict) -> Notification:
    n = Notification.objects.create(user=user, type=type, payload=payload)
    push_unread(n.user_id)
    return n


def notify_many(users: Iterable, type: str, payload: dict) -> list[Notification]:
    rows = [Notification.objects.create(user=u, type=type, payload=payload) for u in users]
    for n in rows:
        push_unread(n.user_id)
    return rows


def admins():
    return User.objects.filter(role=User.ROLE_ADMIN, is_active=True)


def notify_admins(type: str, payload: dict) -> list[Notification]:
    return notify_many(admins(), type, payload)


def mark_all_read(user) -> int:
    updated = Notification.objects.filter(user=user, read_at__isnull=True).update(read_at=timezone.now())
    if updated:
        push_unread(user.id)
    return updated


def list_notifications(user, *, page: int = 1, page_size: int = 20):
    qs = Notification.objects.filter(user=user).order_by('-created_at')
    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    data = [serialize(n) for n in qs[start:start + page_size]]
    return data, total


def serialize(n: Notification) -> dict:
    return {
        'id': str(n.id),
        'type': n.type,
        'payload': n.payload,
        'createdAt': n.created_at.isoformat() if n.created_at else None,
        'readAt': n.read_at.isoformat() if n.read_at else None,
    }
