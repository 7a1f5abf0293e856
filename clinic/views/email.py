from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.serializers.notify import EmailSendSerializer
from clinic.services import email as email_service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def email_send(request):
    """GET reports which SMTP settings are present; POST sends one e-mail."""
    if request.method == 'GET':
        return Response(email_service.config_status())
    s = EmailSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    return Response(email_service.send_email(v['to'], v['subject'], v['message']))
