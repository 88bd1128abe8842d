"""Django admin configuration for orders."""

from django.contrib import admin

from .models import Order, OrderLine


class OrderLineInline(admin.TabularInline):
    """Read-only lines; prices are snapshots taken when the order was saved."""

    model = OrderLine
    extra = 0
    readonly_fields = ('item', 'quantity', 'unit_price', 'line_total')
    can_delete = False
    max_num = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'owner', 'status', 'payment_method', 'grand_total', 'psg_marked', 'printed', 'created_at')
    list_filter = ('status', 'payment_method', 'psg_marked', 'printed', 'created_at')
    search_fields = ('order_number', 'customer_phone', 'owner__username')
    readonly_fields = (
        'order_number', 'gst_rate', 'subtotal', 'gst_amount', 'cgst', 'sgst', 'grand_total',
        'printed_at', 'created_at', 'updated_at',
    )
    inlines = [OrderLineInline]
