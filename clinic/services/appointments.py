"""
Appointment lifecycle: booking, cancellation and admin triage.

Status moves ``submitted -> pending -> settled``; ``cancelled`` is
reachable from either open status.  Every status change notifies the
owner, and a new booking notifies every admin.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from clinic.exceptions import Conflict, Forbidden, NotFound
from clinic.models import Appointment, Notification
from clinic.permissions import is_admin
from clinic.services import broadcast, dashboard, notifications, vaccinations
from clinic.services.audit import safe_log_action
from clinic.services.sms import ensure_not_opted_out, send_sms

logger = logging.getLogger(__name__)

DEFAULT_TRIAGE_SMS = "Hello {full_name}, this is WeCare Clinic regarding your appointment."


def _refresh_dashboards() -> None:
    """Drop the cached summary and tell dashboards to refetch, once the write is committed."""
    def refresh():
        dashboard.invalidate()
        broadcast.send(broadcast.UPDATES_GROUP, {
            "type": "broadcast.refresh", "ts": timezone.now().isoformat(), "keys": ["appointments"],
        })
    transaction.on_commit(refresh)


def get_for_user(user, appointment_id) -> Appointment:
    """Fetch an appointment visible to ``user`` (owner or admin)."""
    appt = Appointment.objects.filter(id=appointment_id).first()
    if appt is None:
        raise NotFound("Appointment not found")
    if not is_admin(user) and appt.user_id != user.id:
        raise Forbidden("You do not have access to this appointment")
    return appt


@transaction.atomic
def create_appointment(user, data: dict) -> Appointment:
    appt = Appointment.objects.create(user=user, status=Appointment.STATUS_SUBMITTED, **data)
    notifications.notify_admins(Notification.TYPE_APPOINTMENT, {
        'appointment_id': str(appt.id),
        'status': appt.status,
        'full_name': appt.full_name,
    })
    safe_log_action(user=user, action='appointment_create', object_type='appointment', object_id=appt.id)
    logger.info("appointment %s submitted by user %s", appt.id, user.id)
    _refresh_dashboards()
    return appt


def set_status(appt: Appointment, status: str, *, by=None, extra_fields: tuple = ()) -> Appointment:
    """Persist a status change and notify the owner when it changed."""
    previous = appt.status
    appt.status = status
    if by is not None and is_admin(by):
        appt.processed_by = by
    appt.save(update_fields=['status', 'processed_by', 'updated_at', *extra_fields])
    if previous != status:
        notifications.notify(appt.user, Notification.TYPE_APPOINTMENT, {
            'appointment_id': str(appt.id),
            'status': status,
        })
        _refresh_dashboards()
    return appt


def _ensure_open(appt: Appointment, action: str) -> None:
    if appt.status not in Appointment.OPEN_STATUSES:
        raise Conflict(f"Cannot {action} an appointment that is {appt.status}")


def cancel(user, appointment_id) -> Appointment:
    """Owner cancellation from ``submitted`` or ``pending``."""
    appt = Appointment.objects.filter(id=appointment_id, user=user).first()
    if appt is None:
        raise NotFound("Appointment not found")
    _ensure_open(appt, 'cancel')
    with transaction.atomic():
        set_status(appt, Appointment.STATUS_CANCELLED)
    try:
        notifications.notify_admins(Notification.TYPE_APPOINTMENT, {
            'appointment_id': str(appt.id),
            'status': Appointment.STATUS_CANCELLED,
            'patient_id': str(user.id),
        })
    except Exception:
        logger.warning("admin notification for cancelled appointment %s failed", appt.id, exc_info=True)
    safe_log_action(user=user, action='appointment_cancel', object_type='appointment', object_id=appt.id)
    return appt


def history(user):
    """The caller's appointments (newest first) and their status counts."""
    qs = Appointment.objects.filter(user=user).order_by('-created_at')
    agg = qs.aggregate(
        total=Count('id'),
        pending=Count('id', filter=Q(status=Appointment.STATUS_PENDING)),
        settled=Count('id', filter=Q(status=Appointment.STATUS_SETTLED)),
        cancelled=Count('id', filter=Q(status=Appointment.STATUS_CANCELLED)),
        last_created=Max('created_at'),
    )
    stats = {
        'total': agg['total'] or 0,
        'pending': agg['pending'] or 0,
        'settled': agg['settled'] or 0,
        'cancelled': agg['cancelled'] or 0,
        'lastUpdated': agg['last_created'].isoformat() if agg['last_created'] else None,
    }
    return qs, stats


def triage_queue():
    return Appointment.objects.filter(status__in=Appointment.OPEN_STATUSES).order_by('-created_at')


def send_triage_sms(admin, appointment_id, message: str | None = None) -> dict:
    """Text the patient, then move the appointment to ``pending``.

    The status is untouched when the SMS fails.
    """
    appt = Appointment.objects.filter(id=appointment_id).first()
    if appt is None:
        raise NotFound("Appointment not found")
    _ensure_open(appt, 'message')
    text = (message or '').strip() or DEFAULT_TRIAGE_SMS.format(full_name=appt.full_name)
    ensure_not_opted_out(appt.contact_number, appt.user_id)
    result = send_sms(appt.contact_number, text)
    with transaction.atomic():
        set_status(appt, Appointment.STATUS_PENDING, by=admin)
    safe_log_action(user=admin, action='appointment_sms', object_type='appointment', object_id=appt.id,
                    detail={'to': appt.contact_number})
    return result


def settle(admin, appointment_id, item_id):
    """Give dose 1 from ``item_id`` and mark the appointment settled."""
    appt = Appointment.objects.filter(id=appointment_id).first()
    if appt is None:
        raise NotFound("Appointment not found")
    _ensure_open(appt, 'settle')
    item = vaccinations.get_usable_item(item_id)
    with transaction.atomic():
        vaccination = vaccinations.record_dose(appt.user, item, 1, appointment=appt, admin=admin)
        appt.settled_at = timezone.now()
        set_status(appt, Appointment.STATUS_SETTLED, by=admin, extra_fields=('settled_at',))
    safe_log_action(user=admin, action='appointment_settle', object_type='appointment', object_id=appt.id,
                    detail={'itemId': str(item.id), 'vaccinationId': str(vaccination.id)})
    logger.info("appointment %s settled by %s with %s", appt.id, admin.id, item.name)
    return appt, vaccination
