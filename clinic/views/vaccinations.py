from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsPatientRole
from clinic.services import vaccinations


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def vaccination_card(request):
    """The caller's completed doses, one card per appointment."""
    cards = vaccinations.vaccination_card(request.user)
    return Response({'ok': True, 'data': cards, 'maxDose': vaccinations.max_dose(request.user.id)})
