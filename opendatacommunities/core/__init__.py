"""
Core functionality for Open Data Communities API access.

This package contains configuration, credentials, errors, events, logging
and the shared data types.
"""

from .credentials import Credentials, CredentialStore, clear_key, get_key, set_key
from .errors import (
    AuthError,
    ConfigError,
    DataError,
    EmptyFilterError,
    ErrorKind,
    InvalidSizeError,
    NetworkError,
    NoResultsError,
    ODCError,
    RateLimitError,
    ResourceNotFoundError,
    SearchCancelledError,
    ServerError,
    TimeoutError,
    TransportError,
    ValidationError,
)
from .events import EventCollector, EventType, SearchEvent, logging_observer
from .types import Page, PaginationMode, PaginationState


__all__ = [
    # Credentials
    "Credentials",
    "CredentialStore",
    "set_key",
    "get_key",
    "clear_key",
    # Errors
    "ErrorKind",
    "ODCError",
    "ValidationError",
    "EmptyFilterError",
    "InvalidSizeError",
    "NoResultsError",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "ResourceNotFoundError",
    "RateLimitError",
    "ServerError",
    "AuthError",
    "DataError",
    "ConfigError",
    "SearchCancelledError",
    # Events
    "EventType",
    "SearchEvent",
    "EventCollector",
    "logging_observer",
    # Types
    "Page",
    "PaginationMode",
    "PaginationState",
]
