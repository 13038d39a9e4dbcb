"""
Open Data Communities Energy Certificate Client

A Python client for the Open Data Communities energy certificate API,
returning Domestic, Non-domestic and Display Energy Certificates as pandas
DataFrames.

This package features:
- Cursor-based search pagination with page and record limits
- Single certificate and recommendation retrieval
- Bulk file listing, download and CSV extraction
- Schema introspection from the bulk archives
"""

import logging
import os

from .core.logging import configure_logging, enable_debug_for_module, get_logger, set_log_level


__version__ = "0.3.0"

# Configure logging only when asked to through the environment
_log_level = os.environ.get("ODC_LOG_LEVEL")
_log_file = os.environ.get("ODC_LOG_FILE")
if (_log_level or _log_file) and not logging.getLogger("opendatacommunities").handlers:
    configure_logging(
        level=_log_level or "INFO",
        log_file=_log_file,
        console=_log_file is None,
        debug=os.environ.get("ODC_DEBUG", "").lower() == "true",
    )
else:
    logging.getLogger("opendatacommunities").addHandler(logging.NullHandler())

# Import and re-export the main API components
from .api import (
    OpenDataCommunitiesClient,
    get_api_url,
    get_data,
    get_default_client,
    get_meta,
    reset_default_client,
    search_data,
)

# Import and re-export credentials, errors, events and types
from .core.credentials import Credentials, CredentialStore, clear_key, get_key, set_key
from .core.errors import (
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
from .core.events import EventCollector, EventType, SearchEvent
from .core.types import PaginationMode


__all__ = [
    "__version__",
    # Logging
    "configure_logging",
    "enable_debug_for_module",
    "get_logger",
    "set_log_level",
    # API
    "OpenDataCommunitiesClient",
    "get_api_url",
    "get_default_client",
    "reset_default_client",
    "search_data",
    "get_data",
    "get_meta",
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
    # Events and types
    "EventCollector",
    "EventType",
    "SearchEvent",
    "PaginationMode",
]
