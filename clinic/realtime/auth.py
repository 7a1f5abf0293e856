"""
WebSocket authentication from a ``?token=`` query parameter.

Browsers cannot set an ``Authorization`` header on a WebSocket, so the
front-end passes either its DRF token or its JWT access token in the
query string.  Session auth (``AuthMiddlewareStack``) runs first; a
valid token here replaces its result.
"""
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


@database_sync_to_async
def user_for_token(raw: str):
    token = Token.objects.select_related('user').filter(key=raw).first()
    if token is not None:
        return token.user if token.user.is_active else None
    try:
        access = AccessToken(raw)
    except TokenError:
        return None
    return User.objects.filter(id=access.get('user_id'), is_active=True).first()


class QueryTokenAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        params = parse_qs((scope.get('query_string') or b'').decode())
        raw = (params.get('token') or [''])[0]
        if raw:
            user = await user_for_token(raw)
            if user is not None:
                scope = dict(scope, user=user)
        return await super().__call__(scope, receive, send)
