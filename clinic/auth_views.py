"""
Authentication views.

Login hands out both a legacy DRF token and a JWT pair, plus the home
path of the caller's role area (``/dashboard/admin`` for admins and
``/dashboard/patient`` for everyone else).  These views live apart from
``clinic.authentication`` so DRF can import the authentication classes
without pulling in view modules.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from clinic.serializers.auth import (
    LoginSerializer,
    PasswordChangeSerializer,
    PasswordForgotSerializer,
    PasswordResetSerializer,
    RegisterSerializer,
)
from clinic.services import accounts
from clinic.services.audit import safe_log_action


def _user_summary(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'name': user.display_name(),
        'role': user.role,
    }


def _session_payload(user) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': _user_summary(user),
        'home': accounts.home_path(user),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = accounts.register(
        email=v['email'],
        password=v['password'],
        full_name=v['fullName'],
        contact_number=v.get('contactNumber', ''),
        address=v.get('address', ''),
        birthday=v.get('birthday'),
        sex=v.get('sex', ''),
    )
    return Response(_session_payload(user), status=201)

register_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Sign in with email (or username) and password."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    identifier = s.validated_data['identifier']
    password = s.validated_data['password']

    candidate = accounts.find_login_user(identifier)
    username = candidate.username if candidate else identifier
    user = authenticate(request, username=username, password=password)
    if not user:
        safe_log_action(user=None, action='login', object_type='user',
                        detail={'result': 'fail', 'identifier': identifier, 'ip': request.META.get('REMOTE_ADDR')})
        return Response({'ok': False, 'error': 'Invalid email or password'}, status=400)

    safe_log_action(user=user, action='login', object_type='user', object_id=user.id,
                    detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})

    accounts.ensure_profile(user)
    return Response(_session_payload(user), status=200)

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = request.user
    return Response({
        'ok': True,
        'user': _user_summary(user),
        'role': user.role,
        'home': accounts.home_path(user),
        'profile': accounts.profile_payload(user, request),
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        if 'refresh' in data:
            data['jwt_refresh'] = data.pop('refresh')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or all of the caller's tokens."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'error': str(e)}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'blacklisted': count})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_forgot_view(request):
    s = PasswordForgotSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.send_password_reset(s.validated_data['email'])
    # Same answer whether or not the account exists
    return Response({'ok': True, 'message': 'If that email is registered, a reset link has been sent.'})

password_forgot_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_view(request):
    s = PasswordResetSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = accounts.reset_password(v['uid'], v['token'], v['password'])
    safe_log_action(user=user, action='password_reset', object_type='user', object_id=user.id)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def password_change_view(request):
    s = PasswordChangeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.change_password(request.user, s.validated_data['password'])
    return Response({'ok': True})
