"""Orders API views.

Create, edit, list and delete bills, and mark completed bills as printed.
All writes go through :mod:`orders.services`.
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.pagination import StandardResultsSetPagination

from . import services
from .models import Order
from .serializers import OrderSerializer, OrderWriteSerializer


class OrderViewSet(viewsets.ModelViewSet):
    """Order endpoints scoped to the authenticated owner.

    ``PUT`` and ``PATCH`` both behave as partial updates: only the fields
    present in the body are changed, and ``lines`` (when sent) replaces every
    existing line.
    """

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['status', 'psg_marked', 'printed']
    ordering_fields = ['created_at', 'grand_total', 'order_number']
    ordering = ['-created_at']

    def get_queryset(self):
        return (
            Order.objects.filter(owner=self.request.user)
            .prefetch_related('lines__item')
        )

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return OrderWriteSerializer
        return OrderSerializer

    def _output(self, order, status_code=status.HTTP_200_OK):
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data, status=status_code)

    def retrieve(self, request, *args, **kwargs):
        order = services.get_order(kwargs.get('pk'), request.user)
        return self._output(order)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = services.create_order(
            request.user,
            [dict(line) for line in data['lines']],
            customer_phone=data.get('customer_phone'),
            payment_method=data.get('payment_method'),
            status=data.get('status', Order.Status.DRAFT),
            psg_marked=data.get('psg_marked', False),
        )
        return self._output(order, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        patch = dict(serializer.validated_data)
        if 'lines' in patch:
            patch['lines'] = [dict(line) for line in patch['lines']]
        order = services.update_order(kwargs.get('pk'), request.user, patch)
        return self._output(order)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        services.delete_order(kwargs.get('pk'), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='print')
    def mark_printed(self, request, pk=None):
        """Flag a completed order as printed."""
        order = services.mark_printed(pk, request.user)
        return Response({
            'id': order.pk,
            'order_number': order.order_number,
            'printed': order.printed,
            'printed_at': order.printed_at,
        })
