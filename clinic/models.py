"""
Database models for the WeCare clinic backend.

The tables mirror the clinic's operational records: user profiles,
animal-bite appointments, vaccine inventory, administered doses,
patient/admin messages, in-app notifications and phone verification
codes.  Domain rows use UUID primary keys so identifiers exposed to the
front-end stay opaque.
"""
from __future__ import annotations

import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model carrying the clinic role.

    ``admin`` users run the triage, inventory and patient screens.
    ``patient`` and ``provider`` users see the patient area.
    """
    ROLE_ADMIN = 'admin'
    ROLE_PATIENT = 'patient'
    ROLE_PROVIDER = 'provider'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_PATIENT, 'Patient'),
        (ROLE_PROVIDER, 'Provider'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    @property
    def is_clinic_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    def display_name(self) -> str:
        profile = getattr(self, 'profile', None)
        if profile is not None and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


def _avatar_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return f"avatars/{instance.user_id}/{uuid.uuid4().hex}{ext}"


class Profile(models.Model):
    """Contact and demographic details for a user.

    ``phone`` only changes through OTP verification; ``contact_number`` is
    the self-declared number captured at registration.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    birthday = models.DateField(null=True, blank=True)
    sex = models.CharField(max_length=16, blank=True)
    avatar = models.FileField(upload_to=_avatar_upload, max_length=512, blank=True)
    # Set by an inbound STOP reply
    sms_opt_out = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.full_name or self.user.username} ({self.user.role})"


class InventoryItem(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = ((STATUS_ACTIVE, 'active'), (STATUS_INACTIVE, 'inactive'))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    # Vials on hand; fractional once a multi-dose vial is opened
    stock = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    low_stock_threshold = models.IntegerField(default=10)
    doses_per_vial = models.PositiveIntegerField(default=1)
    expiration_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold

    def __str__(self) -> str:
        return f"{self.name} (stock {self.stock})"


class Appointment(models.Model):
    """An animal-bite consultation request submitted by a patient."""
    STATUS_SUBMITTED = 'submitted'
    STATUS_PENDING = 'pending'
    STATUS_SETTLED = 'settled'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_SUBMITTED, 'submitted'),
        (STATUS_PENDING, 'pending'),
        (STATUS_SETTLED, 'settled'),
        (STATUS_CANCELLED, 'cancelled'),
    )
    OPEN_STATUSES = (STATUS_SUBMITTED, STATUS_PENDING)

    CATEGORY_CHOICES = (('I', 'I'), ('II', 'II'), ('III', 'III'))
    ANIMAL_CHOICES = (
        ('dog', 'dog'),
        ('cat', 'cat'),
        ('venomous_snake', 'venomous_snake'),
        ('other', 'other'),
    )
    ANIMAL_STATE_CHOICES = (
        ('healthy', 'healthy'),
        ('sick', 'sick'),
        ('died', 'died'),
        ('killed', 'killed'),
        ('unknown', 'unknown'),
    )
    VACCINATED_BY_CHOICES = (('barangay', 'barangay'), ('doh', 'doh'), ('other', 'other'))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')

    # Personal details
    full_name = models.CharField(max_length=255)
    address = models.TextField(blank=True, null=True)
    birthday = models.DateField(null=True, blank=True)
    age = models.IntegerField(null=True, blank=True)
    sex = models.CharField(max_length=16, blank=True, null=True)
    civil_status = models.CharField(max_length=16, blank=True, null=True)
    contact_number = models.CharField(max_length=32)
    date_of_bite = models.DateField(null=True, blank=True)
    bite_address = models.TextField(blank=True, null=True)
    time_of_bite = models.TimeField(null=True, blank=True)

    # Animal bite details
    category = models.CharField(max_length=3, choices=CATEGORY_CHOICES, blank=True, null=True)
    animal = models.CharField(max_length=16, choices=ANIMAL_CHOICES, blank=True, null=True)
    animal_other = models.CharField(max_length=255, blank=True, null=True)
    ownership = models.JSONField(default=list, blank=True)
    animal_state = models.CharField(max_length=10, choices=ANIMAL_STATE_CHOICES, blank=True, null=True)
    animal_vaccinated_12mo = models.BooleanField(null=True, blank=True)
    vaccinated_by = models.CharField(max_length=10, choices=VACCINATED_BY_CHOICES, blank=True, null=True)
    vaccinated_by_other = models.CharField(max_length=255, blank=True, null=True)

    # Wound management
    wound_washed = models.BooleanField(null=True, blank=True)
    wound_antiseptic = models.BooleanField(null=True, blank=True)
    wound_herbal = models.TextField(blank=True, null=True)
    wound_antibiotics = models.TextField(blank=True, null=True)
    wound_other = models.TextField(blank=True, null=True)

    # Allergies & site of bite
    allergies_food = models.BooleanField(null=True, blank=True)
    allergies_drugs = models.BooleanField(null=True, blank=True)
    allergies_other = models.TextField(blank=True, null=True)
    site_of_bite = models.TextField(blank=True, null=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_SUBMITTED, db_index=True)
    processed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='processed_appointments'
    )
    settled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', 'created_at'], name='appt_user_created_idx'),
            models.Index(fields=['status', 'created_at'], name='appt_status_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} [{self.status}]"


class Vaccination(models.Model):
    """One administered (or scheduled) anti-rabies dose."""
    STATUS_SCHEDULED = 'scheduled'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_SCHEDULED, 'scheduled'),
        (STATUS_COMPLETED, 'completed'),
        (STATUS_CANCELLED, 'cancelled'),
    )
    MAX_DOSES = 3

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='vaccinations')
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='vaccinations'
    )
    vaccine_item = models.ForeignKey(
        InventoryItem, null=True, blank=True, on_delete=models.SET_NULL, related_name='vaccinations'
    )
    dose_number = models.PositiveSmallIntegerField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    administered_at = models.DateTimeField(null=True, blank=True)
    admin_user = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='administered_vaccinations'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(dose_number__gte=1) & models.Q(dose_number__lte=3),
                name='vaccination_dose_number_1_to_3',
            ),
        ]
        indexes = [models.Index(fields=['patient', 'status'], name='vacc_patient_status_idx')]

    def __str__(self) -> str:
        return f"dose {self.dose_number} for {self.patient_id} [{self.status}]"


class Message(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_messages')
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='received_messages')
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['sender', 'recipient', 'created_at'], name='msg_pair_created_idx'),
            models.Index(fields=['recipient', 'read_at'], name='msg_recipient_read_idx'),
        ]

    def __str__(self) -> str:
        return f"msg {self.id} {self.sender_id}->{self.recipient_id}"


class Notification(models.Model):
    TYPE_APPOINTMENT = 'appointment_update'
    TYPE_VACCINATION = 'vaccination_update'
    TYPE_MESSAGE = 'message'
    TYPE_CHOICES = (
        (TYPE_APPOINTMENT, 'appointment_update'),
        (TYPE_VACCINATION, 'vaccination_update'),
        (TYPE_MESSAGE, 'message'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=24, choices=TYPE_CHOICES)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['user', 'read_at'], name='notif_user_read_idx')]

    def __str__(self) -> str:
        return f"{self.type} -> {self.user_id}"


class PhoneVerification(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='phone_verifications')
    phone = models.CharField(max_length=32)
    code = models.CharField(max_length=6)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()
    consumed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['user', 'phone', 'code'], name='otp_user_phone_code_idx')]

    def __str__(self) -> str:
        return f"otp {self.phone} for {self.user_id}"


class SmsDispatch(models.Model):
    """Outbound SMS attempt and its latest delivery status."""
    STATUS_SENT = 'sent'
    STATUS_FAILED = 'failed'

    to = models.CharField(max_length=32)
    body = models.TextField()
    provider = models.CharField(max_length=16)
    provider_message_id = models.CharField(max_length=64, blank=True, db_index=True)
    status = models.CharField(max_length=24, default=STATUS_SENT)
    error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"sms {self.to} via {self.provider} [{self.status}]"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
