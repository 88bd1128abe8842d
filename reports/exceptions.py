"""Reasons a reports request is refused by the PIN check."""

from rest_framework import status

from core.exceptions import ServiceError


class PinNotConfigured(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'PIN not set. Please set a PIN first.'
    default_code = 'pin_not_configured'


class InvalidPinFormat(ServiceError):
    default_detail = 'Invalid PIN format. Must be 4 digits.'
    default_code = 'invalid_pin_format'


class InvalidPin(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Invalid PIN.'
    default_code = 'invalid_pin'
