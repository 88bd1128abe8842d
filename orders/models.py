"""Database models for orders (bills) and order lines."""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from items.models import Item


class Order(models.Model):
    """A bill. Drafts are editable and deletable; completed bills are reported on.

    Money columns hold the values computed by :mod:`orders.pricing` at the
    time the lines were last set, using the GST rate stored in ``gst_rate``.
    """

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        COMPLETED = 'completed', 'Completed'

    class PaymentMethod(models.TextChoices):
        CASH = 'cash', 'Cash'
        ONLINE = 'online', 'Online'

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='orders')
    order_number = models.CharField(max_length=50, unique=True, editable=False)
    customer_phone = models.CharField(max_length=20, null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, null=True, blank=True)

    gst_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    gst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    sgst = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    psg_marked = models.BooleanField(default=False)
    printed = models.BooleanField(default=False)
    printed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', 'status', 'created_at'], name='order_owner_status_idx'),
            models.Index(fields=['owner', 'psg_marked', 'created_at'], name='order_owner_psg_idx'),
        ]

    def __str__(self):
        return self.order_number

    @property
    def is_draft(self):
        return self.status == self.Status.DRAFT

    @property
    def is_completed(self):
        return self.status == self.Status.COMPLETED


class OrderLine(models.Model):
    """Line item inside an order.

    ``unit_price`` is copied from the item when the line is created and is
    never re-read from the catalog afterwards.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='lines')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='order_lines')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = "Order Line"
        verbose_name_plural = "Order Lines"
        ordering = ['id']
        indexes = [
            models.Index(fields=['order', 'item'], name='orderline_order_item_idx'),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.item.name} ({self.order.order_number})"
