"""
Admin patient management: dose progress, reminders and recording doses.

Only patients with at least one completed vaccination are listed; they
are split into those still in progress and those fully vaccinated.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.exceptions import ClinicError
from clinic.permissions import IsAdminRole
from clinic.serializers.inventory import DoseBatchSerializer, SettleSerializer
from clinic.serializers.notify import PatientSmsSerializer
from clinic.services import dashboard, inventory, vaccinations
from clinic.services.audit import safe_log_action
from clinic.services.sms import ensure_not_opted_out, send_sms


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_patients(request):
    summaries = vaccinations.patient_summaries()
    return Response({
        'ok': True,
        'inProgress': summaries['inProgress'],
        'fully': summaries['fully'],
        'availableItems': [inventory.serialize(i) for i in vaccinations.usable_items()],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def patient_sms(request, user_id):
    s = PatientSmsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    message = (s.validated_data.get('message') or '').strip()
    if not message:
        raise ClinicError("Message cannot be empty")
    contact = vaccinations.patient_contact(user_id)
    if not contact:
        raise ClinicError("No contact number on file for this patient")
    ensure_not_opted_out(contact, user_id)
    result = send_sms(contact, message)
    safe_log_action(user=request.user, action='patient_sms', object_type='user', object_id=user_id,
                    detail={'to': contact})
    return Response({'ok': True, 'result': result})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def patient_record_vaccination(request, user_id):
    s = SettleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = vaccinations.record_next_dose(request.user, user_id, s.validated_data.get('itemId'))
    dashboard.invalidate()
    safe_log_action(user=request.user, action='vaccination_record', object_type='vaccination', object_id=v.id,
                    detail={'patientId': user_id, 'dose': v.dose_number})
    return Response({'ok': True, 'data': vaccinations.serialize(v)}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def patient_insert_doses(request, user_id):
    s = DoseBatchSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    created = vaccinations.insert_doses(
        request.user, user_id, v['itemId'],
        start_dose=v['startDose'], num_doses=v['numDoses'], appointment_id=v.get('appointmentId'),
    )
    dashboard.invalidate()
    safe_log_action(user=request.user, action='vaccination_record', object_type='user', object_id=user_id,
                    detail={'doses': [d.dose_number for d in created]})
    return Response({'ok': True, 'data': [vaccinations.serialize(d) for d in created]}, status=201)
