"""Query and response serializers for the reports APIs.

Money values are rounded half-up to two places only here, on the way out.
"""

from decimal import ROUND_HALF_UP

from rest_framework import serializers

from orders.models import Order

from .aggregation import GROUP_BY_CHOICES


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, rounding=ROUND_HALF_UP, **kwargs)


class DateRangeQuerySerializer(serializers.Serializer):
    from_date = serializers.DateField(required=False)
    to_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('from_date'), attrs.get('to_date')
        if start and end and start > end:
            raise serializers.ValidationError({'from_date': ['Start date must not be after end date.']})
        return attrs


class OrderReportQuerySerializer(DateRangeQuerySerializer):
    payment_method = serializers.ChoiceField(
        choices=[('all', 'All')] + list(Order.PaymentMethod.choices), required=False, default='all',
    )


class ItemReportQuerySerializer(DateRangeQuerySerializer):
    item_id = serializers.IntegerField(required=False, min_value=1)


class DailyReportQuerySerializer(DateRangeQuerySerializer):
    group_by = serializers.ChoiceField(choices=GROUP_BY_CHOICES, required=False, default='day')


class TopItemsQuerySerializer(DateRangeQuerySerializer):
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=100)


class DateTimeRangeQuerySerializer(serializers.Serializer):
    from_datetime = serializers.DateTimeField(required=False)
    to_datetime = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('from_datetime'), attrs.get('to_datetime')
        if start and end and start > end:
            raise serializers.ValidationError({'from_datetime': ['Start must not be after end.']})
        return attrs


class ItemAggregateSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    item_name = serializers.CharField()
    total_quantity = serializers.IntegerField()
    total_amount = money_field()
    order_count = serializers.IntegerField()
    average_price = money_field()


class ItemSummarySerializer(serializers.Serializer):
    total_items = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
    total_amount = money_field()


class TopItemSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    item_name = serializers.CharField()
    total_quantity = serializers.IntegerField()
    total_amount = money_field()


class PSGOrderContributionSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    order_number = serializers.CharField()
    quantity = serializers.IntegerField()
    amount = money_field()
    order_date = serializers.DateTimeField()


class PSGItemSerializer(ItemAggregateSerializer):
    orders = PSGOrderContributionSerializer(many=True)


class PSGSummarySerializer(ItemSummarySerializer):
    total_orders = serializers.IntegerField()


class OrderSummarySerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_amount = money_field()
    total_gst = money_field()
    total_subtotal = money_field()


class PaymentBreakdownSerializer(serializers.Serializer):
    payment_method = serializers.CharField(allow_null=True)
    count = serializers.IntegerField()
    amount = money_field()


class DailyTotalsSerializer(serializers.Serializer):
    period = serializers.DateField()
    order_count = serializers.IntegerField()
    total_amount = money_field()
    subtotal = money_field()
    gst_amount = money_field()
    average_order_value = money_field()


class PSGItemOrderSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    order_number = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = money_field()
    line_total = money_field()
    order_date = serializers.DateTimeField()
    payment_method = serializers.CharField(allow_null=True)


class PSGItemDetailsSerializer(serializers.Serializer):
    item = serializers.SerializerMethodField()
    statistics = serializers.SerializerMethodField()
    orders = PSGItemOrderSerializer(many=True)

    def get_item(self, obj):
        return {'id': obj.item.id, 'name': obj.item.name, 'price': f"{obj.item.price:.2f}"}

    def get_statistics(self, obj):
        return {
            'total_quantity': obj.total_quantity,
            'total_amount': money_field().to_representation(obj.total_amount),
            'order_count': obj.order_count,
            'average_quantity': money_field().to_representation(obj.average_quantity),
        }
