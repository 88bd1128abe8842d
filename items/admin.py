"""Django admin configuration for catalog items."""

from django.contrib import admin

from .models import Item


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    """Admin configuration for items."""

    list_display = ('name', 'owner', 'price', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'owner__username')
