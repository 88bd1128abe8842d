"""Shared pagination classes."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Default pagination used by most API endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100
