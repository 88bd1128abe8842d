"""Database models for business owners' billing profiles."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class BusinessProfile(models.Model):
    """Bill header details and report settings for one business owner.

    ``gst_percentage`` is read when an order is priced; changing it later
    does not touch orders that were already priced.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='business_profile')
    business_name = models.CharField(max_length=200, null=True, blank=True)
    business_category = models.CharField(max_length=100, null=True, blank=True)
    fssai_number = models.CharField(max_length=20, null=True, blank=True)
    phone_number = models.CharField(max_length=20, null=True, blank=True)
    business_address = models.TextField(null=True, blank=True)
    gstin_number = models.CharField(max_length=15, null=True, blank=True)
    gst_slab = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(28)])
    gst_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    business_logo = models.ImageField(upload_to='business_logos/', null=True, blank=True)
    reports_pin_hash = models.CharField(max_length=128, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Business Profile"
        verbose_name_plural = "Business Profiles"

    def __str__(self):
        return self.business_name or f"Business of {self.user.username}"

    @property
    def has_reports_pin(self):
        return bool(self.reports_pin_hash)
