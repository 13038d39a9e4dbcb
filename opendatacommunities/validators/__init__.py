"""Validation of search parameters."""

from .validate import normalize_filter_names, validate_filters, validate_size


__all__ = ["normalize_filter_names", "validate_filters", "validate_size"]
