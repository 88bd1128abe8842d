"""Sales and PSG report API views.

Every endpoint needs an authenticated owner and the owner's 4-digit reports
PIN (see :class:`reports.permissions.HasValidReportsPin`). Reports only ever
look at completed orders.
"""

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import StandardResultsSetPagination
from items.models import Item
from orders.serializers import OrderSerializer

from . import aggregation
from .permissions import HasValidReportsPin, get_supplied_pin
from .pin import verify_reports_pin
from .serializers import (
    DailyReportQuerySerializer,
    DailyTotalsSerializer,
    DateTimeRangeQuerySerializer,
    ItemAggregateSerializer,
    ItemReportQuerySerializer,
    ItemSummarySerializer,
    OrderReportQuerySerializer,
    OrderSummarySerializer,
    PaymentBreakdownSerializer,
    PSGItemDetailsSerializer,
    PSGItemSerializer,
    PSGSummarySerializer,
    TopItemSerializer,
    TopItemsQuerySerializer,
)


def _query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _date_range(from_date, to_date):
    return {'from': from_date.isoformat(), 'to': to_date.isoformat()}


def _datetime_range(start, end):
    return {'from': start.isoformat(), 'to': end.isoformat()}


class VerifyReportsPinView(APIView):
    """Check a reports PIN without fetching any report."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        verify_reports_pin(request.user, get_supplied_pin(request))
        return Response({'detail': 'PIN verified.'}, status=status.HTTP_200_OK)


class SalesReportViewSet(viewsets.ViewSet):
    """Order, item, period and best-seller reports."""

    permission_classes = [permissions.IsAuthenticated, HasValidReportsPin]

    @action(detail=False, methods=['get'])
    def orders(self, request):
        """Completed orders in a date window with totals per payment method."""
        params = _query(OrderReportQuerySerializer, request)
        start, end, from_date, to_date = aggregation.resolve_date_window(params.get('from_date'), params.get('to_date'))

        orders = aggregation.completed_orders(request.user, start, end).prefetch_related('lines__item')
        if params['payment_method'] != 'all':
            orders = orders.filter(payment_method=params['payment_method'])
        totals, breakdown = aggregation.order_summary(orders)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(orders.order_by('-created_at', '-id'), request, view=self)
        response = paginator.get_paginated_response(OrderSerializer(page, many=True).data)
        response.data['summary'] = OrderSummarySerializer(totals).data
        response.data['payment_breakdown'] = PaymentBreakdownSerializer(breakdown, many=True).data
        response.data['date_range'] = _date_range(from_date, to_date)
        return response

    @action(detail=False, methods=['get'])
    def items(self, request):
        """Item-level totals in a date window, best sellers first."""
        params = _query(ItemReportQuerySerializer, request)
        start, end, from_date, to_date = aggregation.resolve_date_window(params.get('from_date'), params.get('to_date'))

        aggregates = aggregation.aggregate_items(request.user, start, end, item_id=params.get('item_id'))
        return Response({
            'item_reports': ItemAggregateSerializer(aggregates, many=True).data,
            'summary': ItemSummarySerializer(aggregation.summarize_items(aggregates)).data,
            'date_range': _date_range(from_date, to_date),
        })

    @action(detail=False, methods=['get'])
    def daily(self, request):
        params = _query(DailyReportQuerySerializer, request)
        start, end, from_date, to_date = aggregation.resolve_date_window(
            params.get('from_date'), params.get('to_date'), default_days=30,
        )
        rows = aggregation.daily_totals(request.user, start, end, params['group_by'])
        return Response({
            'daily_reports': DailyTotalsSerializer(rows, many=True).data,
            'group_by': params['group_by'],
            'date_range': _date_range(from_date, to_date),
        })

    @action(detail=False, methods=['get'], url_path='top-items')
    def top_items(self, request):
        params = _query(TopItemsQuerySerializer, request)
        start, end, from_date, to_date = aggregation.resolve_date_window(
            params.get('from_date'), params.get('to_date'), default_days=30,
        )
        aggregates = aggregation.top_selling_items(request.user, start, end, limit=params['limit'])
        return Response({
            'top_items': TopItemSerializer(aggregates, many=True).data,
            'date_range': _date_range(from_date, to_date),
        })


class PSGReportViewSet(viewsets.ViewSet):
    """Reports restricted to PSG-marked completed orders."""

    permission_classes = [permissions.IsAuthenticated, HasValidReportsPin]

    def _window(self, request):
        params = _query(DateTimeRangeQuerySerializer, request)
        return aggregation.resolve_datetime_window(params.get('from_datetime'), params.get('to_datetime'))

    @action(detail=False, methods=['get'])
    def reports(self, request):
        start, end = self._window(request)
        result = aggregation.aggregate_psg(request.user, start, end)
        return Response({
            'psg_items': PSGItemSerializer(result['items'], many=True).data,
            'summary': PSGSummarySerializer(result['summary']).data,
            'date_range': _datetime_range(start, end),
        })

    @action(detail=False, methods=['get'])
    def orders(self, request):
        """PSG order history, newest first."""
        start, end = self._window(request)
        orders = (
            aggregation.completed_orders(request.user, start, end, psg_only=True)
            .prefetch_related('lines__item')
            .order_by('-created_at', '-id')
        )
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(orders, request, view=self)
        response = paginator.get_paginated_response(OrderSerializer(page, many=True).data)
        response.data['date_range'] = _datetime_range(start, end)
        return response

    @action(detail=False, methods=['get'], url_path=r'items/(?P<item_id>[0-9]+)')
    def item_details(self, request, item_id=None):
        start, end = self._window(request)
        item = Item.objects.filter(owner=request.user, pk=item_id, is_active=True).first()
        if item is None:
            raise NotFound('Item not found.')

        details = aggregation.psg_item_details(request.user, item, start, end)
        data = PSGItemDetailsSerializer(details).data
        data['date_range'] = _datetime_range(start, end)
        return Response(data)
