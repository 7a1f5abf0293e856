"""
Patient appointment endpoints: the three-step booking form, history
and cancellation.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Appointment
from clinic.pagination import page_params, paginate
from clinic.permissions import IsPatientRole
from clinic.serializers.appointments import (
    AppointmentSerializer,
    StepValidateSerializer,
    steps_payload,
    validate_step,
)
from clinic.services import accounts
from clinic.services import appointments as svc

DETAIL_FIELDS = [
    'full_name', 'address', 'birthday', 'age', 'sex', 'civil_status', 'contact_number',
    'date_of_bite', 'bite_address', 'time_of_bite', 'category', 'animal', 'animal_other', 'ownership',
    'animal_state', 'animal_vaccinated_12mo', 'vaccinated_by', 'vaccinated_by_other',
    'wound_washed', 'wound_antiseptic', 'wound_herbal', 'wound_antibiotics', 'wound_other',
    'allergies_food', 'allergies_drugs', 'allergies_other', 'site_of_bite', 'status',
]


def serialize_appointment(a: Appointment, *, full: bool = True) -> dict:
    data = {
        'id': str(a.id),
        'userId': a.user_id,
        'full_name': a.full_name,
        'contact_number': a.contact_number,
        'category': a.category,
        'animal': a.animal,
        'date_of_bite': a.date_of_bite.isoformat() if a.date_of_bite else None,
        'status': a.status,
        'created_at': a.created_at.isoformat() if a.created_at else None,
        'updated_at': a.updated_at.isoformat() if a.updated_at else None,
        'settled_at': a.settled_at.isoformat() if a.settled_at else None,
        'processed_by': a.processed_by_id,
    }
    if full:
        for field in DETAIL_FIELDS:
            value = getattr(a, field)
            data[field] = value.isoformat() if hasattr(value, 'isoformat') else value
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_steps(request):
    return Response({'ok': True, 'data': steps_payload()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_validate_step(request):
    s = StepValidateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    errors = validate_step(s.validated_data['step'], s.validated_data['values'])
    return Response({'ok': not errors, 'errors': errors})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_create(request):
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appt = svc.create_appointment(request.user, s.validated_data)
    return Response({'ok': True, 'data': serialize_appointment(appt)}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_history(request):
    page, page_size = page_params(request)
    qs, stats = svc.history(request.user)
    rows, pagination = paginate(qs, page, page_size)
    return Response({
        'ok': True,
        'data': [serialize_appointment(a, full=False) for a in rows],
        'stats': stats,
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id):
    appt = svc.get_for_user(request.user, appointment_id)
    return Response({'ok': True, 'data': serialize_appointment(appt)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_cancel(request, appointment_id):
    appt = svc.cancel(request.user, appointment_id)
    return Response({'ok': True, 'data': serialize_appointment(appt, full=False)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def appointment_prefill(request):
    profile = accounts.ensure_profile(request.user)
    return Response({'ok': True, 'data': {
        'full_name': profile.full_name or '',
        'contact_number': profile.contact_number or profile.phone or '',
        'address': profile.address or '',
        'birthday': profile.birthday.isoformat() if profile.birthday else None,
        'sex': profile.sex or '',
    }})
