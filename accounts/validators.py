"""Input validators shared by the accounts and orders serializers."""

import re

import phonenumbers
from django.conf import settings
from rest_framework import serializers

GSTIN_RE = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$')


def normalize_phone(value):
    """Validate a mobile/landline number and return it in E.164 form.

    Numbers without a country code are parsed in ``PHONE_DEFAULT_REGION``.
    """
    raw = str(value or '').strip()
    if not raw:
        return None

    clean = re.sub(r'(?<!^)\+|[^\d+]', '', raw)
    if clean.startswith('00'):
        clean = '+' + clean[2:]

    try:
        region = None if clean.startswith('+') else getattr(settings, 'PHONE_DEFAULT_REGION', 'IN')
        parsed = phonenumbers.parse(clean, region)
        if not phonenumbers.is_valid_number(parsed):
            raise ValueError
    except (phonenumbers.NumberParseException, ValueError):
        raise serializers.ValidationError(f"Invalid phone number: {raw}.")

    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def validate_gstin(value):
    if value in (None, ''):
        return None
    value = str(value).strip().upper()
    if not GSTIN_RE.match(value):
        raise serializers.ValidationError("Invalid GSTIN format.")
    return value
