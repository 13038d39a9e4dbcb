"""
Network utilities for Open Data Communities API access.

This module provides request building and execution, and the pagination
loop for search endpoints.
"""

from .pagination import (
    PaginatedSearch,
    calculate_page_size,
    finalize_search_results,
    should_continue_search,
)
from .request import (
    build_and_execute_request,
    build_headers,
    build_search_request,
    perform_request,
)


__all__ = [
    # Pagination
    "PaginatedSearch",
    "calculate_page_size",
    "should_continue_search",
    "finalize_search_results",
    # Requests
    "build_search_request",
    "build_and_execute_request",
    "build_headers",
    "perform_request",
]
