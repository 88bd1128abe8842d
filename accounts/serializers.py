"""Serializers for the accounts app.

Includes:
- Registration of a business owner account
- Business profile read/update (the PIN hash is never exposed)
- Reports PIN payloads
"""

import re

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from .models import BusinessProfile
from .services import is_valid_pin_format
from .validators import normalize_phone, validate_gstin


User = get_user_model()


class RegisterSerializer(serializers.ModelSerializer):
    """Create an owner account together with an empty business profile."""

    password = serializers.CharField(write_only=True, min_length=8)
    business_name = serializers.CharField(required=False, allow_blank=True, max_length=200, write_only=True)

    class Meta:
        model = User
        fields = ('id', 'username', 'password', 'email', 'business_name')
        read_only_fields = ('id',)

    def validate_username(self, value):
        if not re.match(r'^[a-zA-Z0-9._]+$', value):
            raise serializers.ValidationError("Username may contain letters, digits, dots and underscores only.")
        if len(value) < 4:
            raise serializers.ValidationError("Username must be at least 4 characters long.")
        return value

    def validate_email(self, value):
        return (value or '').lower().strip()

    def create(self, validated_data):
        business_name = (validated_data.pop('business_name', '') or '').strip()
        with transaction.atomic():
            user = User.objects.create_user(**validated_data)
            BusinessProfile.objects.create(user=user, business_name=business_name or None)
        return user


class BusinessProfileSerializer(serializers.ModelSerializer):
    """Business details shown on bills and used for GST calculation."""

    username = serializers.ReadOnlyField(source='user.username')
    has_reports_pin = serializers.ReadOnlyField()

    class Meta:
        model = BusinessProfile
        fields = [
            'id',
            'username',
            'business_name',
            'business_category',
            'fssai_number',
            'phone_number',
            'business_address',
            'gstin_number',
            'gst_slab',
            'gst_percentage',
            'business_logo',
            'has_reports_pin',
            'updated_at',
        ]
        read_only_fields = ['id', 'updated_at']

    def validate_phone_number(self, value):
        return normalize_phone(value)

    def validate_gstin_number(self, value):
        return validate_gstin(value)


class ReportsPinSerializer(serializers.Serializer):
    """Payload carrying a 4-digit reports PIN."""

    pin = serializers.CharField(max_length=4, min_length=4, trim_whitespace=False)

    def validate_pin(self, value):
        if not is_valid_pin_format(value):
            raise serializers.ValidationError("PIN must be exactly 4 digits.")
        return value
