"""Business profile lookups used by pricing and the reports PIN guard."""

import logging
import re
from decimal import Decimal

from django.contrib.auth.hashers import make_password

from .models import BusinessProfile

logger = logging.getLogger(__name__)

PIN_RE = re.compile(r'[0-9]{4}')


def is_valid_pin_format(pin) -> bool:
    return isinstance(pin, str) and PIN_RE.fullmatch(pin) is not None


def get_tax_rate(owner) -> Decimal | None:
    """Return the owner's GST percentage, or None when not configured."""
    rate = BusinessProfile.objects.filter(user=owner).values_list('gst_percentage', flat=True).first()
    return rate


def get_pin_hash(owner) -> str | None:
    pin_hash = BusinessProfile.objects.filter(user=owner).values_list('reports_pin_hash', flat=True).first()
    return pin_hash or None


def set_reports_pin(owner, pin: str) -> BusinessProfile:
    """Hash and store the 4-digit reports PIN, creating the profile if needed.

    The caller is expected to have validated the format already.
    """
    profile, _ = BusinessProfile.objects.get_or_create(user=owner)
    profile.reports_pin_hash = make_password(pin)
    profile.save(update_fields=['reports_pin_hash', 'updated_at'])
    logger.info('Reports PIN updated for user %s', owner.pk)
    return profile
