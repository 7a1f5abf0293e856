"""
URL mappings for the clinic API.

Paths carry no trailing slash to match the front-end's fetch calls.
Object ids are UUIDs except user ids, which are integers.
"""
from django.urls import include, path

from .auth_views import (
    jwt_logout_view,
    jwt_refresh_view,
    login_view,
    me_view,
    password_change_view,
    password_forgot_view,
    password_reset_view,
    register_view,
)
from .views import health
from .views.appointments import (
    appointment_cancel,
    appointment_create,
    appointment_detail,
    appointment_history,
    appointment_prefill,
    appointment_steps,
    appointment_validate_step,
)
from .views.clinic_info import clinic_info
from .views.dashboard import admin_dashboard
from .views.email import email_send
from .views.inventory import inventory_alerts, inventory_item_detail, inventory_items
from .views.messages import message_contacts, message_read, message_send, message_thread
from .views.notifications import notification_list, notification_read_all, notification_unread_count
from .views.otp import otp_start, otp_verify
from .views.patients import list_patients, patient_insert_doses, patient_record_vaccination, patient_sms
from .views.profile import profile, profile_avatar
from .views.sms import sms_fallback, sms_send, sms_webhook
from .views.triage import (
    admin_appointment_detail,
    admin_appointment_settle,
    admin_appointment_sms,
    admin_appointments,
    vaccine_items,
)
from .views.vaccinations import vaccination_card


urlpatterns = [
    # django_prometheus.urls serves /metrics
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    path('api/clinic', clinic_info, name='clinic_info'),

    # Authentication
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/password/forgot', password_forgot_view, name='password_forgot_view'),
    path('api/auth/password/reset', password_reset_view, name='password_reset_view'),
    path('api/auth/password/change', password_change_view, name='password_change_view'),

    # Profile
    path('api/profile', profile, name='profile'),
    path('api/profile/avatar', profile_avatar, name='profile_avatar'),

    # Patient appointments
    path('api/appointments', appointment_create, name='appointment_create'),
    path('api/appointments/steps', appointment_steps, name='appointment_steps'),
    path('api/appointments/validate-step', appointment_validate_step, name='appointment_validate_step'),
    path('api/appointments/history', appointment_history, name='appointment_history'),
    path('api/appointments/prefill', appointment_prefill, name='appointment_prefill'),
    path('api/appointments/<uuid:appointment_id>', appointment_detail, name='appointment_detail'),
    path('api/appointments/<uuid:appointment_id>/cancel', appointment_cancel, name='appointment_cancel'),
    path('api/patient/vaccination-card', vaccination_card, name='vaccination_card'),

    # Admin triage
    path('api/admin/appointments', admin_appointments, name='admin_appointments'),
    path('api/admin/appointments/<uuid:appointment_id>', admin_appointment_detail, name='admin_appointment_detail'),
    path('api/admin/appointments/<uuid:appointment_id>/sms', admin_appointment_sms, name='admin_appointment_sms'),
    path('api/admin/appointments/<uuid:appointment_id>/settle', admin_appointment_settle,
         name='admin_appointment_settle'),
    path('api/admin/vaccine-items', vaccine_items, name='vaccine_items'),

    # Admin inventory
    path('api/admin/inventory', inventory_items, name='inventory_items'),
    path('api/admin/inventory/alerts', inventory_alerts, name='inventory_alerts'),
    path('api/admin/inventory/<uuid:item_id>', inventory_item_detail, name='inventory_item_detail'),

    # Admin dashboard & patients
    path('api/admin/dashboard', admin_dashboard, name='admin_dashboard'),
    path('api/admin/patients', list_patients, name='list_patients'),
    path('api/admin/patients/<int:user_id>/sms', patient_sms, name='patient_sms'),
    path('api/admin/patients/<int:user_id>/vaccinations', patient_record_vaccination,
         name='patient_record_vaccination'),
    path('api/admin/patients/<int:user_id>/doses', patient_insert_doses, name='patient_insert_doses'),

    # Messages
    path('api/messages', message_send, name='message_send'),
    path('api/messages/contacts', message_contacts, name='message_contacts'),
    path('api/messages/thread', message_thread, name='message_thread'),
    path('api/messages/read', message_read, name='message_read'),

    # Notifications
    path('api/notifications', notification_list, name='notification_list'),
    path('api/notifications/unread-count', notification_unread_count, name='notification_unread_count'),
    path('api/notifications/read-all', notification_read_all, name='notification_read_all'),

    # SMS / e-mail / OTP
    path('api/sms', sms_send, name='sms_send'),
    path('api/sms/webhook', sms_webhook, name='sms_webhook'),
    path('api/sms/fallback', sms_fallback, name='sms_fallback'),
    path('api/email', email_send, name='email_send'),
    path('api/otp/start', otp_start, name='otp_start'),
    path('api/otp/verify', otp_verify, name='otp_verify'),
]
