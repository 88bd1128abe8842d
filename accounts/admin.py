"""Django admin configuration for business profiles."""

from django.contrib import admin

from .models import BusinessProfile


@admin.register(BusinessProfile)
class BusinessProfileAdmin(admin.ModelAdmin):
    """Admin configuration for business profiles."""

    list_display = ('user', 'business_name', 'gstin_number', 'gst_percentage', 'has_pin')
    search_fields = ('user__username', 'business_name', 'gstin_number')
    # PIN hashes are managed through the API only
    exclude = ('reports_pin_hash',)

    def has_pin(self, obj):
        return obj.has_reports_pin
    has_pin.boolean = True
    has_pin.short_description = 'Reports PIN'
