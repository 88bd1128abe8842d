"""Errors raised by the order lifecycle services."""

from rest_framework import status

from core.exceptions import ServiceError


class InvalidItemReference(ServiceError):
    default_detail = 'One or more items not found or inactive.'
    default_code = 'invalid_item_reference'


class PaymentMethodRequired(ServiceError):
    default_detail = 'Payment method is required for completed orders.'
    default_code = 'payment_method_required'


class OrderNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Order not found.'
    default_code = 'not_found'


class NotDeletable(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Only draft orders can be deleted.'
    default_code = 'not_deletable'


class AllocationExhausted(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Order creation failed: could not allocate an order number.'
    default_code = 'allocation_exhausted'


class InvalidStatusTransition(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Completed orders cannot be moved back to draft.'
    default_code = 'invalid_status_transition'
