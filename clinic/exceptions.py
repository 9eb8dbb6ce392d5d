"""
Error taxonomy and the project-wide DRF exception handler.

Every error leaving the API is normalized to
``{"ok": false, "error": {"code": ..., "message": ...}}``.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: 'validation_error',
    401: 'unauthorized',
    403: 'forbidden',
    404: 'not_found',
    405: 'method_not_allowed',
    429: 'throttled',
}


class Unauthorized(exceptions.NotAuthenticated):
    default_detail = 'Authentication required.'
    default_code = 'unauthorized'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class NotFound(exceptions.NotFound):
    default_code = 'not_found'


class ValidationError(exceptions.ValidationError):
    """Field-level validation failure; ``detail`` is a dict keyed by field."""


class ConflictOrIntegrityWarning(UserWarning):
    """A data inconsistency noticed while posting; logged and audited, never raised."""

    def __init__(self, message: str, *, object_type: str | None = None,
                 object_id: int | None = None, detail: dict | None = None):
        super().__init__(message)
        self.message = message
        self.object_type = object_type
        self.object_id = object_id
        self.detail = detail or {}


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception("unhandled error in %s", getattr(view, '__class__', type(view)).__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = STATUS_CODES.get(resp.status_code, 'api_error')
    if resp.status_code >= 500:
        logger.error("api error %s: %s", resp.status_code, detail)
    # keep WWW-Authenticate / Retry-After set by DRF
    headers = {h: resp[h] for h in ('WWW-Authenticate', 'Retry-After') if resp.has_header(h)}
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code,
                    headers=headers)
