"""Database models for the item catalog."""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Item(models.Model):
    """A sellable menu/catalog entry owned by one business.

    Deleting an item through the API only marks it inactive so that order
    lines keep pointing at a real row.
    """

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    image = models.ImageField(upload_to='items/', null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['owner', 'is_active'], name='item_owner_active_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.price})"
