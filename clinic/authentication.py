"""
Authentication classes for the REST API.

Clients may send either the legacy DRF token (``Authorization: Token
<key>``) returned at login or a JWT access token (``Authorization:
Bearer <jwt>``).  Keeping these classes out of the view modules avoids
circular imports when DRF loads ``DEFAULT_AUTHENTICATION_CLASSES``.
"""
from __future__ import annotations

from rest_framework import authentication
from rest_framework_simplejwt.authentication import JWTAuthentication


class TokenAuthentication(authentication.TokenAuthentication):
    keyword = 'Token'


class BearerJWTAuthentication(JWTAuthentication):
    """JWT authentication that stays silent for non-Bearer headers.

    ``TokenAuthentication`` runs first, so by the time this class sees a
    request any ``Token`` header has already been handled.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None or not header.split()[0:1] == [b'Bearer']:
            return None
        return super().authenticate(request)
