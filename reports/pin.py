"""Reports PIN verification.

The check is stateless: every report request carries the PIN and is checked
against the hash stored on the business profile.
"""

import logging

from django.contrib.auth.hashers import check_password

from accounts.services import get_pin_hash, is_valid_pin_format

from .exceptions import InvalidPin, InvalidPinFormat, PinNotConfigured

logger = logging.getLogger(__name__)


def verify_reports_pin(owner, pin):
    """Raise unless ``pin`` matches the owner's reports PIN.

    Checked in order: a PIN is configured, the supplied PIN is four digits,
    the supplied PIN matches the stored hash.
    """
    pin_hash = get_pin_hash(owner)
    if not pin_hash:
        raise PinNotConfigured()

    if not is_valid_pin_format(pin):
        raise InvalidPinFormat()

    if not check_password(pin, pin_hash):
        logger.warning('Reports PIN mismatch for user %s', owner.pk)
        raise InvalidPin()
