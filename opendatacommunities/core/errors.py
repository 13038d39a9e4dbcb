"""
Error handling module for Open Data Communities API access.

This module defines the exception hierarchy used throughout the package.
Every exception carries an ErrorKind so callers can branch on the category
of failure without matching on class names.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Category of a package error."""

    VALIDATION = "validation"
    NO_RESULTS = "no_results"
    TRANSPORT = "transport"
    AUTH = "auth"
    DATA = "data"
    CONFIG = "config"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class ODCError(Exception):
    """
    Base class for all Open Data Communities related errors.

    All exceptions raised by the package inherit from this class.

    Attributes:
        message: Error message
        details: Additional error details
        kind: Category of the error
    """

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize an ODCError.

        Args:
            message: Error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message

        detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class ValidationError(ODCError):
    """
    Error related to validation.

    Raised before any network call for malformed filters, out-of-range
    page sizes or unknown certificate types and endpoints.
    """

    kind = ErrorKind.VALIDATION


class EmptyFilterError(ValidationError):
    """No filtering parameters were supplied to a search."""

    pass


class InvalidSizeError(ValidationError):
    """The size parameter is not a number between 1 and 5000."""

    pass


class NoResultsError(ODCError):
    """The first page of a search returned no records."""

    kind = ErrorKind.NO_RESULTS


class TransportError(ODCError):
    """
    Error related to API requests.

    Covers network failures and HTTP error statuses. The response status is
    available as ``status_code`` when the server answered.
    """

    kind = ErrorKind.TRANSPORT

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


class NetworkError(TransportError):
    """Error related to network connection issues."""

    pass


class TimeoutError(NetworkError):
    """Error related to request timeouts."""

    pass


class ResourceNotFoundError(TransportError):
    """Error related to resources not found (404)."""

    pass


class RateLimitError(TransportError):
    """
    Error related to rate limiting.

    Attributes:
        message: Error message
        retry_after: Suggested retry delay in seconds
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, details)

    def __str__(self) -> str:
        base_str = super().__str__()
        if self.retry_after is not None:
            return f"{base_str} (retry after {self.retry_after} seconds)"
        return base_str


class ServerError(TransportError):
    """Error related to upstream server failures (5xx)."""

    pass


class AuthError(ODCError):
    """
    Error related to authentication.

    Raised when no credentials are configured, before any request is sent,
    and when the API rejects the supplied credentials.
    """

    kind = ErrorKind.AUTH

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


class DataError(ODCError):
    """
    Error related to data handling.

    Raised for unparseable response bodies and archives that lack the
    requested member.
    """

    kind = ErrorKind.DATA


class ConfigError(ODCError):
    """Error related to configuration issues."""

    kind = ErrorKind.CONFIG


class SearchCancelledError(ODCError):
    """A search was cancelled between or before page requests."""

    kind = ErrorKind.CANCELLED


def format_error_details(error: Exception) -> str:
    """
    Format error details for logging.

    Args:
        error: Exception object

    Returns:
        Formatted error details string
    """
    if isinstance(error, ODCError):
        if error.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
            return f"{error.__class__.__name__}: {error.message} ({detail_str})"
        return f"{error.__class__.__name__}: {error.message}"

    return f"{error.__class__.__name__}: {str(error)}"


def classify_api_error(
    status_code: int, response_text: str, retry_after: Optional[float] = None
) -> ODCError:
    """
    Classify API error based on status code and response text.

    Args:
        status_code: HTTP status code
        response_text: Response text
        retry_after: Seconds from the Retry-After header, used for 429

    Returns:
        Appropriate error instance for the status
    """
    details = {
        "status_code": status_code,
        "response_text": response_text[:100] + ("..." if len(response_text) > 100 else ""),
    }

    if status_code in (401, 403):
        return AuthError(f"Not authorized (status code: {status_code})", details)
    elif status_code == 404:
        return ResourceNotFoundError(f"Resource not found (status code: {status_code})", details)
    elif status_code == 429:
        return RateLimitError(f"Rate limit exceeded (status code: {status_code})", retry_after, details)
    elif status_code >= 500:
        return ServerError(f"Server error (status code: {status_code})", details)
    elif status_code >= 400:
        return TransportError(f"Client error (status code: {status_code})", details)
    else:
        return TransportError(f"Unexpected API error (status code: {status_code})", details)
