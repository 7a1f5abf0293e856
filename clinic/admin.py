"""
Django admin registrations for the clinic models.

Superusers can inspect bookings, stock and message traffic through
``/admin/`` while the front-end is being brought up.
"""

from django.contrib import admin

from .models import (
    User,
    Profile,
    InventoryItem,
    Appointment,
    Vaccination,
    Message,
    Notification,
    PhoneVerification,
    SmsDispatch,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_active', 'is_superuser')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'full_name', 'phone', 'contact_number', 'sms_opt_out')
    list_filter = ('sms_opt_out',)
    search_fields = ('user__username', 'full_name', 'phone', 'contact_number')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'stock', 'low_stock_threshold', 'doses_per_vial', 'expiration_date', 'status')
    list_filter = ('status',)
    search_fields = ('name',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'user', 'category', 'status', 'created_at')
    list_filter = ('status', 'category', 'animal')
    search_fields = ('id', 'full_name', 'contact_number', 'user__username')


@admin.register(Vaccination)
class VaccinationAdmin(admin.ModelAdmin):
    list_display = ('patient', 'dose_number', 'status', 'vaccine_item', 'administered_at')
    list_filter = ('status', 'dose_number')
    search_fields = ('patient__username', 'patient__profile__full_name')


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'recipient', 'created_at', 'read_at')
    search_fields = ('sender__username', 'recipient__username')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'type', 'created_at', 'read_at')
    list_filter = ('type',)
    search_fields = ('user__username',)


@admin.register(PhoneVerification)
class PhoneVerificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'phone', 'created_at', 'expires_at', 'consumed_at')
    search_fields = ('user__username', 'phone')


@admin.register(SmsDispatch)
class SmsDispatchAdmin(admin.ModelAdmin):
    list_display = ('to', 'provider', 'provider_message_id', 'status', 'created_at')
    list_filter = ('provider', 'status')
    search_fields = ('to', 'provider_message_id')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
