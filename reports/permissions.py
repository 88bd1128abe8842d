from django.conf import settings
from rest_framework import permissions

from .pin import verify_reports_pin


def get_supplied_pin(request):
    """Read the PIN from the header, then the ``pin`` query param, then the body."""
    header = getattr(settings, 'REPORTS_PIN_HEADER', 'X-Reports-Pin')
    pin = request.headers.get(header)
    if pin is None:
        pin = request.query_params.get('pin')
    if pin is None and request.method not in permissions.SAFE_METHODS:
        data = request.data
        if hasattr(data, 'get'):
            pin = data.get('pin')
    return pin


class HasValidReportsPin(permissions.BasePermission):
    """Allow access only with the owner's reports PIN.

    A wrong or missing PIN raises a specific error instead of the generic
    permission denied response.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        verify_reports_pin(request.user, get_supplied_pin(request))
        return True
