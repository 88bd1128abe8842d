"""DRF serializers for orders APIs.

Write serializers only check the shape of the payload. Item ownership,
pricing and status rules are enforced by :mod:`orders.services`.
"""

from rest_framework import serializers

from accounts.validators import normalize_phone

from .models import Order, OrderLine


class OrderLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class OrderWriteSerializer(serializers.Serializer):
    """Payload for creating or editing an order.

    On update every field is optional; only the keys sent are applied.
    """

    lines = OrderLineInputSerializer(many=True, allow_empty=False)
    customer_phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Order.Status.choices, required=False)
    psg_marked = serializers.BooleanField(required=False)

    def validate_customer_phone(self, value):
        return normalize_phone(value)


class OrderLineSerializer(serializers.ModelSerializer):
    """Line as stored on the order, with the item's current name."""

    item_id = serializers.ReadOnlyField(source='item.id')
    item_name = serializers.ReadOnlyField(source='item.name')

    class Meta:
        model = OrderLine
        fields = ['id', 'item_id', 'item_name', 'quantity', 'unit_price', 'line_total']


class OrderSerializer(serializers.ModelSerializer):
    lines = OrderLineSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'customer_phone',
            'status',
            'status_display',
            'payment_method',
            'gst_rate',
            'subtotal',
            'gst_amount',
            'cgst',
            'sgst',
            'grand_total',
            'psg_marked',
            'printed',
            'printed_at',
            'lines',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
