"""
Domain exceptions and the unified DRF exception handler.

Every error leaves the API as ``{"ok": false, "error": "<message>"}``;
validation failures also carry a ``fields`` map keyed by field name.
"""
from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base error raised by the service layer."""
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None, fields: dict | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.fields = fields


class NotFound(ClinicError):
    status_code = 404


class Forbidden(ClinicError):
    status_code = 403


class Conflict(ClinicError):
    status_code = 409


class ServiceUnavailable(ClinicError):
    """An upstream provider or its configuration failed."""
    status_code = 500


class NotImplementedProvider(ClinicError):
    status_code = 501


def _first_message(data) -> str:
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for value in data.values():
            return _first_message(value)
        return 'Invalid request'
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else 'Invalid request'
    return str(data)


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        body = {'ok': False, 'error': exc.message}
        if exc.fields:
            body['fields'] = exc.fields
        return Response(body, status=exc.status_code)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request') if context else None
        logger.error("unhandled API error on %s", getattr(request, 'path', '?'), exc_info=exc)
        return Response({'ok': False, 'error': str(exc) or exc.__class__.__name__}, status=500)

    body = {'ok': False, 'error': _first_message(resp.data)}
    if isinstance(exc, drf_exceptions.ValidationError) and isinstance(resp.data, dict):
        body['fields'] = resp.data
    elif isinstance(exc, (Http404, DjangoPermissionDenied)):
        body['error'] = str(exc) or _first_message(resp.data)
    resp.data = body
    return resp
