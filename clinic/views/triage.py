"""
Admin triage of submitted and pending appointments.

Two actions move an appointment forward: texting the patient (status
becomes ``pending``) and settling it with a first dose from inventory.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.pagination import page_params, paginate
from clinic.permissions import IsAdminRole
from clinic.serializers.inventory import SettleSerializer
from clinic.serializers.notify import PatientSmsSerializer
from clinic.services import appointments as svc
from clinic.services import inventory, vaccinations
from clinic.views.appointments import serialize_appointment


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_appointments(request):
    page, page_size = page_params(request)
    rows, pagination = paginate(svc.triage_queue(), page, page_size)
    return Response({
        'ok': True,
        'data': [serialize_appointment(a) for a in rows],
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_appointment_detail(request, appointment_id):
    appt = svc.get_for_user(request.user, appointment_id)
    return Response({'ok': True, 'data': serialize_appointment(appt)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_appointment_sms(request, appointment_id):
    s = PatientSmsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = svc.send_triage_sms(request.user, appointment_id, s.validated_data.get('message'))
    return Response({'ok': True, 'status': 'pending', 'result': result})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_appointment_settle(request, appointment_id):
    s = SettleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt, vaccination = svc.settle(request.user, appointment_id, s.validated_data.get('itemId'))
    return Response({
        'ok': True,
        'data': serialize_appointment(appt, full=False),
        'vaccination': vaccinations.serialize(vaccination),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def vaccine_items(request):
    """Active items with stock left, for the settle picker."""
    return Response({'ok': True, 'data': [inventory.serialize(i) for i in vaccinations.usable_items()]})
