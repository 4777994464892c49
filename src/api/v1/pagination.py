"""Pagination utilities for API v1."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page number pagination sized so a full generated week fits on one page."""

    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 200
