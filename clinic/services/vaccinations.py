"""
Vaccination doses, stock decrement and per-patient dose summaries.

A patient's progress is the highest ``dose_number`` among their
completed vaccinations; three completed doses make a patient fully
vaccinated.
"""
from __future__ import annotations

import logging
import re
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from clinic.exceptions import ClinicError, NotFound
from clinic.models import Appointment, InventoryItem, Notification, Profile, Vaccination
from clinic.services import notifications

logger = logging.getLogger(__name__)

User = get_user_model()

MAX_DOSES = Vaccination.MAX_DOSES
CENT = Decimal('0.01')


def usable_items():
    return InventoryItem.objects.filter(status=InventoryItem.STATUS_ACTIVE, stock__gt=0).order_by('name')


def get_usable_item(item_id) -> InventoryItem:
    """Resolve ``item_id`` to an active item with stock left."""
    items = usable_items()
    if not items.exists():
        raise ClinicError("No vaccine items available in inventory.")
    try:
        item = items.filter(id=item_id).first() if item_id else None
    except (ValueError, TypeError, DjangoValidationError):
        item = None
    if item is None:
        raise ClinicError("Invalid selection")
    return item


def decrement_stock(item_id, doses: int = 1) -> None:
    """Take ``doses`` worth of vials out of stock, never going below zero."""
    item = InventoryItem.objects.select_for_update().filter(id=item_id).first()
    if item is None:
        return
    per_vial = Decimal(max(1, item.doses_per_vial or 1))
    used = (Decimal(doses) / per_vial).quantize(CENT, rounding=ROUND_HALF_UP)
    item.stock = max(Decimal('0'), (item.stock - used).quantize(CENT))
    item.save(update_fields=['stock', 'updated_at'])


@transaction.atomic
def record_dose(patient, item: InventoryItem | None, dose_number: int, *,
                appointment: Appointment | None = None, admin=None, notify: bool = True) -> Vaccination:
    if not 1 <= int(dose_number) <= MAX_DOSES:
        raise ClinicError(f"Dose number must be between 1 and {MAX_DOSES}")
    v = Vaccination.objects.create(
        patient=patient,
        appointment=appointment,
        vaccine_item=item,
        dose_number=dose_number,
        status=Vaccination.STATUS_COMPLETED,
        administered_at=timezone.now(),
        admin_user=admin,
    )
    if item is not None:
        decrement_stock(item.id)
    if notify:
        notifications.notify(patient, Notification.TYPE_VACCINATION, {
            'vaccination_id': str(v.id),
            'dose_number': v.dose_number,
            'status': v.status,
        })
    return v


def max_dose(patient_id) -> int:
    agg = Vaccination.objects.filter(
        patient_id=patient_id, status=Vaccination.STATUS_COMPLETED
    ).aggregate(m=Max('dose_number'))
    return agg['m'] or 0


def latest_appointment(patient_id) -> Appointment | None:
    return Appointment.objects.filter(user_id=patient_id).order_by('-created_at').first()


def record_next_dose(admin, patient_id, item_id) -> Vaccination:
    """Record dose ``maxDose + 1`` against the patient's newest appointment."""
    patient = User.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound("Patient not found")
    current = max_dose(patient.id)
    if current >= MAX_DOSES:
        raise ClinicError("Patient already has all 3 doses")
    item = get_usable_item(item_id)
    return record_dose(patient, item, current + 1, appointment=latest_appointment(patient.id), admin=admin)


@transaction.atomic
def insert_doses(admin, patient_id, item_id, *, start_dose: int, num_doses: int, appointment_id=None) -> list[Vaccination]:
    """Insert consecutive completed doses; doses past the third are skipped."""
    patient = User.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound("Patient not found")
    item = get_usable_item(item_id)
    appointment = None
    if appointment_id:
        appointment = Appointment.objects.filter(id=appointment_id, user=patient).first()
        if appointment is None:
            raise NotFound("Appointment not found")
    created = []
    for i in range(max(0, int(num_doses))):
        dose = int(start_dose) + i
        if dose > MAX_DOSES:
            continue
        created.append(record_dose(patient, item, dose, appointment=appointment, admin=admin))
    return created


def progress_label(dose: int) -> str:
    if dose >= MAX_DOSES:
        return 'Fully Vaccinated'
    if dose > 0:
        return 'In Progress'
    return 'Not Started'


def dose_distribution() -> dict:
    """Count patients by their highest completed dose."""
    rows = (
        Vaccination.objects.filter(status=Vaccination.STATUS_COMPLETED)
        .values('patient_id')
        .annotate(m=Max('dose_number'))
    )
    dist = {'first': 0, 'second': 0, 'third': 0}
    for row in rows:
        m = row['m'] or 0
        if m >= 3:
            dist['third'] += 1
        elif m == 2:
            dist['second'] += 1
        elif m == 1:
            dist['first'] += 1
    return dist


def patient_summaries() -> dict:
    """Dose summaries for every patient with a completed vaccination.

    Returns ``{'inProgress': [...], 'fully': [...]}``.
    """
    doses = (
        Vaccination.objects.filter(status=Vaccination.STATUS_COMPLETED)
        .select_related('vaccine_item', 'patient', 'patient__profile')
        .order_by('patient_id', 'dose_number', 'administered_at')
    )
    by_patient: dict = {}
    for v in doses:
        by_patient.setdefault(v.patient_id, {'patient': v.patient, 'doses': []})['doses'].append(v)

    newest_contact = {}
    for a in Appointment.objects.filter(user_id__in=list(by_patient)).order_by('user_id', '-created_at') \
            .values('user_id', 'contact_number'):
        newest_contact.setdefault(a['user_id'], a['contact_number'])

    in_progress, fully = [], []
    for patient_id, entry in by_patient.items():
        patient = entry['patient']
        profile = getattr(patient, 'profile', None)
        top = max(d.dose_number for d in entry['doses'])
        summary = {
            'userId': patient_id,
            'name': (profile.full_name if profile and profile.full_name else None) or str(patient_id)[:6],
            'contact': newest_contact.get(patient_id) or (profile and (profile.phone or profile.contact_number)) or None,
            'smsOptOut': bool(profile and profile.sms_opt_out),
            'maxDose': top,
            'progress': progress_label(top),
            'doses': [serialize(d) for d in entry['doses']],
        }
        (fully if top >= MAX_DOSES else in_progress).append(summary)
    in_progress.sort(key=lambda s: s['name'].lower())
    fully.sort(key=lambda s: s['name'].lower())
    return {'inProgress': in_progress, 'fully': fully}


def patient_contact(patient_id) -> str | None:
    appt = latest_appointment(patient_id)
    if appt and appt.contact_number:
        return appt.contact_number
    profile = Profile.objects.filter(user_id=patient_id).first()
    return (profile.phone or profile.contact_number or None) if profile else None


def serialize(v: Vaccination) -> dict:
    return {
        'id': str(v.id),
        'doseNumber': v.dose_number,
        'status': v.status,
        'administeredAt': v.administered_at.isoformat() if v.administered_at else None,
        'appointmentId': str(v.appointment_id) if v.appointment_id else None,
        'itemId': str(v.vaccine_item_id) if v.vaccine_item_id else None,
        'itemName': v.vaccine_item.name if v.vaccine_item_id and v.vaccine_item else None,
    }


_LABEL_RE = re.compile(r'[^a-z0-9-_]+')
_UNDERSCORES_RE = re.compile(r'_+')


def card_label(name: str | None) -> str:
    label = _UNDERSCORES_RE.sub('_', _LABEL_RE.sub('_', (name or 'vaccination-card').lower()))
    return label or 'vaccination-card'


def vaccination_card(patient) -> list[dict]:
    """Completed doses grouped by appointment (or by dose when unlinked)."""
    doses = (
        Vaccination.objects.filter(patient=patient, status=Vaccination.STATUS_COMPLETED)
        .select_related('vaccine_item', 'appointment')
        .order_by('administered_at', 'dose_number')
    )
    groups: dict = {}
    for v in doses:
        key = str(v.appointment_id or v.id)
        group = groups.get(key)
        if group is None:
            full_name = v.appointment.full_name if v.appointment_id and v.appointment else None
            group = groups[key] = {
                'key': key,
                'appointmentId': str(v.appointment_id) if v.appointment_id else None,
                'fullName': full_name,
                'label': card_label(full_name),
                'doses': [],
            }
        group['doses'].append(serialize(v))
    for group in groups.values():
        group['maxDose'] = max(d['doseNumber'] for d in group['doses'])
    return list(groups.values())
