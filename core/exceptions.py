"""API error handling shared by all apps.

Every error body carries a ``detail`` message and a ``code`` that clients can
branch on (e.g. ``payment_method_required``, ``invalid_pin``).
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(APIException):
    """Base class for business-rule failures raised by service functions."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be processed.'
    default_code = 'error'


def _first_code(codes):
    if isinstance(codes, str):
        return codes
    if isinstance(codes, list) and codes:
        return _first_code(codes[0])
    if isinstance(codes, dict):
        return 'invalid'
    return 'error'


def api_exception_handler(exc, context):
    """Wrap DRF's handler and add a machine-checkable ``code`` key."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, APIException):
        code = _first_code(exc.get_codes())
    else:
        code = 'error'

    if isinstance(response.data, dict):
        response.data.setdefault('code', code)
    else:
        response.data = {'detail': response.data, 'code': code}

    if response.status_code >= 500:
        logger.error('API error %s: %s', code, exc)
    return response
