"""
API endpoint URLs.

Certificate types use underscores in Python (``non_domestic``) and hyphens
in URLs (``non-domestic``); the ``recommendation`` endpoint is served under
the plural ``recommendations`` path.
"""

from typing import Dict, Optional, Tuple

from ..core.config import API, CERTIFICATE_TYPES, ENDPOINTS
from ..core.errors import ValidationError


# URL path segment for each endpoint
ENDPOINT_PATHS = {
    "certificate": "certificate",
    "recommendation": "recommendations",
    "search": "search",
}


def normalize_certificate_type(certificate_type: str) -> str:
    """
    Return the underscore form of a certificate type.

    Raises:
        ValidationError: If the type is unknown
    """
    normalized = str(certificate_type).replace("-", "_")
    if normalized not in CERTIFICATE_TYPES:
        raise ValidationError(
            f"type must be one of {', '.join(CERTIFICATE_TYPES)}",
            {"type": certificate_type},
        )
    return normalized


def url_lookup_table(base_url: Optional[str] = None) -> Dict[Tuple[str, str], str]:
    """Build the table of (certificate type, endpoint) to URL."""
    base_url = base_url or API["BASE_URL"]
    return {
        (cert_type, endpoint): "/".join(
            [base_url, cert_type.replace("_", "-"), ENDPOINT_PATHS[endpoint]]
        )
        for cert_type in CERTIFICATE_TYPES
        for endpoint in ENDPOINTS
    }


def get_api_url(certificate_type: str, endpoint: str, base_url: Optional[str] = None) -> str:
    """
    Construct the API URL for a certificate type and endpoint.

    Args:
        certificate_type: One of ``domestic``, ``non_domestic``, ``display``
        endpoint: One of ``certificate``, ``recommendation``, ``search``
        base_url: API root (default: from config)

    Returns:
        Complete endpoint URL, e.g.
        ``https://epc.opendatacommunities.org/api/v1/non-domestic/recommendations``

    Raises:
        ValidationError: If the type or endpoint is unknown
    """
    cert_type = normalize_certificate_type(certificate_type)
    if endpoint not in ENDPOINTS:
        raise ValidationError(
            f"endpoint must be one of {', '.join(ENDPOINTS)}", {"endpoint": endpoint}
        )

    return url_lookup_table(base_url)[(cert_type, endpoint)]


def join_url(*parts: str) -> str:
    """Join URL segments with single slashes."""
    return "/".join(str(part).strip("/") for part in parts if str(part))
