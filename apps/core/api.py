# apps/core/api.py
"""
REST framework glue shared by the academics and detentions APIs.
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import OperationalError
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import SchedulingError, StoreUnavailable

logger = logging.getLogger(__name__)


def _validation_payload(exc):
    if hasattr(exc, 'error_dict'):
        errors = {field: [str(m) for e in errs for m in e.messages] for field, errs in exc.error_dict.items()}
        detail = '; '.join(message for messages in errors.values() for message in messages)
        error_list = [e for errs in exc.error_dict.values() for e in errs]
    else:
        errors = None
        detail = '; '.join(str(message) for message in exc.messages)
        error_list = exc.error_list

    codes = {getattr(error, 'code', None) for error in error_list}
    codes.discard(None)
    data = {
        'code': codes.pop() if len(codes) == 1 else 'validation_error',
        'detail': detail,
    }
    if errors:
        data['errors'] = errors
    return data


def _error_code(exc):
    code = getattr(exc, 'default_code', None)
    if code:
        return code
    if isinstance(exc, Http404):
        return 'not_found'
    if isinstance(exc, DjangoPermissionDenied):
        return 'permission_denied'
    return 'error'


def exception_handler(exc, context):
    """
    Map service-layer errors onto JSON responses before falling back to DRF.

    Responses always carry ``code`` and a human readable ``detail``.
    """
    if isinstance(exc, OperationalError):
        logger.error(f"Store unavailable while handling {context.get('view')}: {exc}")
        exc = StoreUnavailable()

    if isinstance(exc, SchedulingError):
        return Response(exc.as_dict(), status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(_validation_payload(exc), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ProtectedError):
        return Response(
            {'code': 'protected', 'detail': 'The record is still referenced and cannot be deleted.'},
            status=status.HTTP_409_CONFLICT,
        )

    response = drf_exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and 'detail' in response.data:
        response.data.setdefault('code', _error_code(exc))
    return response
