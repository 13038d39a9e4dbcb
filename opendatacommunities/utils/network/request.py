"""
Authenticated request building and execution.

Every API call goes through ``perform_request``, which sends exactly one
request and translates ``requests`` failures and HTTP error statuses into the
package error hierarchy. There is no retry.
"""

from typing import Any, Dict, Mapping, Optional

import requests

from ...core.config import API, PAGINATION
from ...core.credentials import Credentials, default_store
from ...core.errors import (
    NetworkError,
    TimeoutError,
    TransportError,
    classify_api_error,
    format_error_details,
)
from ...core.logging import get_logger


logger = get_logger(__name__)


def resolve_credentials(credentials: Optional[Credentials] = None) -> Credentials:
    """
    Return the explicit credentials or those of the default store.

    Raises:
        AuthError: If no credentials are available
    """
    if credentials is not None:
        return credentials
    return default_store.get_credentials()


def build_headers(
    credentials: Optional[Credentials] = None, authenticate: bool = True, accept_json: bool = True
) -> Dict[str, str]:
    """
    Build request headers.

    Args:
        credentials: Explicit credentials, default store when None
        authenticate: Add the Basic-Authentication header
        accept_json: Add the JSON Accept header

    Raises:
        AuthError: If authentication is requested and no credentials exist
    """
    headers = {}
    if accept_json:
        headers["Accept"] = API["ACCEPT"]
    if authenticate:
        headers["Authorization"] = resolve_credentials(credentials).authorization
    return headers


def build_search_request(
    api_url: str,
    query_params: Mapping[str, Any],
    search_after: Optional[str] = None,
    credentials: Optional[Credentials] = None,
) -> requests.PreparedRequest:
    """
    Build one authenticated GET request for a search page.

    The continuation token is added as the ``search-after`` parameter next to
    the existing parameters.

    Args:
        api_url: Complete search endpoint URL
        query_params: Normalized query parameters
        search_after: Continuation token from the previous page
        credentials: Explicit credentials, default store when None

    Returns:
        Prepared request

    Raises:
        AuthError: If no credentials are available
    """
    params = dict(query_params)
    if search_after is not None:
        params[PAGINATION["TOKEN_PARAM"]] = search_after

    request = requests.Request(
        method="GET",
        url=api_url,
        params=params,
        headers=build_headers(credentials),
    )
    return request.prepare()


def parse_retry_after(response: requests.Response) -> Optional[float]:
    """Read the Retry-After header in seconds; HTTP-date values are ignored."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def perform_request(
    session: requests.Session,
    request: requests.PreparedRequest,
    timeout: Optional[float] = None,
    stream: bool = False,
) -> requests.Response:
    """
    Send a prepared request once, translating failures.

    Args:
        session: Session used to send the request
        request: Prepared request
        timeout: Timeout in seconds (default: from config)
        stream: Stream the response body

    Returns:
        Successful response

    Raises:
        TimeoutError: If the request timed out
        NetworkError: If the connection failed
        TransportError: For other request failures and HTTP error statuses
        AuthError: For HTTP 401 and 403
    """
    timeout = timeout or API["TIMEOUT"]
    logger.debug(f"Reading data from API: {request.method} {request.url}")

    try:
        response = session.send(request, timeout=timeout, stream=stream)
    except requests.Timeout as e:
        raise TimeoutError(f"Request timed out after {timeout}s", {"url": request.url}) from e
    except requests.ConnectionError as e:
        raise NetworkError(f"Connection error: {str(e)}", {"url": request.url}) from e
    except requests.RequestException as e:
        raise TransportError(f"Request failed: {str(e)}", {"url": request.url}) from e

    if response.status_code >= 400:
        error = classify_api_error(
            response.status_code, response.text or "", retry_after=parse_retry_after(response)
        )
        logger.error(f"Failed to read data: {format_error_details(error)}")
        raise error

    return response


def build_and_execute_request(
    session: requests.Session,
    api_url: str,
    query_params: Mapping[str, Any],
    search_after: Optional[str] = None,
    credentials: Optional[Credentials] = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Build one search request and send it."""
    request = build_search_request(api_url, query_params, search_after, credentials)
    return perform_request(session, request, timeout=timeout)
