"""Serializers for the item catalog."""

from rest_framework import serializers

from .models import Item


def _image_value_to_url(value, *, request=None):
    """Return a usable URL for an ImageField value (absolute when possible)."""

    if not value:
        return None

    raw = str(value)
    if raw.startswith('http://') or raw.startswith('https://'):
        return raw

    try:
        url = value.url
    except ValueError:
        return raw

    if request is not None:
        return request.build_absolute_uri(url)
    return url


class ItemSerializer(serializers.ModelSerializer):
    """Catalog item. ``owner`` is always the authenticated user."""

    image_url = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = ['id', 'name', 'price', 'image', 'image_url', 'created_at']
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'image': {'write_only': True, 'required': False},
        }

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Item name must be between 1 and 200 characters.")
        return value

    def get_image_url(self, obj):
        request = self.context.get('request') if hasattr(self, 'context') else None
        return _image_value_to_url(obj.image, request=request)
