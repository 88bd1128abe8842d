"""Item catalog API views.

Owners manage their own menu. Deleting an item only deactivates it so past
bills keep their line items.
"""

import logging

from rest_framework import filters, viewsets
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsOwner

from .models import Item
from .serializers import ItemSerializer

logger = logging.getLogger(__name__)


class ItemViewSet(viewsets.ModelViewSet):
    """Item CRUD scoped to the authenticated owner's active items."""

    serializer_class = ItemSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = None
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Item.objects.filter(owner=self.request.user, is_active=True)

    def perform_create(self, serializer):
        item = serializer.save(owner=self.request.user)
        logger.info('Item %s created by user %s', item.pk, self.request.user.pk)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=['is_active', 'updated_at'])
        logger.info('Item %s deactivated by user %s', instance.pk, self.request.user.pk)
