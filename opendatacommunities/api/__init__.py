"""
API access for Open Data Communities.

Exposes the client class and module-level shortcuts that use a shared
default client backed by the default credential store.
"""

import threading
from typing import Any, Dict, Optional

import pandas as pd

from .client import OpenDataCommunitiesClient
from .urls import get_api_url


_default_client: Optional[OpenDataCommunitiesClient] = None
_default_client_lock = threading.Lock()


def get_default_client() -> OpenDataCommunitiesClient:
    """Return the shared client, creating it on first use."""
    global _default_client
    with _default_client_lock:
        if _default_client is None:
            _default_client = OpenDataCommunitiesClient()
        return _default_client


def reset_default_client() -> None:
    """Close and drop the shared client."""
    global _default_client
    with _default_client_lock:
        if _default_client is not None:
            _default_client.close()
        _default_client = None


def search_data(certificate_type: str, paginate: str = "none", max_pages: Optional[int] = None,
                max_records: Optional[int] = None, **filters: Any) -> pd.DataFrame:
    """Search certificates with the shared client; see OpenDataCommunitiesClient.search."""
    return get_default_client().search(
        certificate_type, paginate=paginate, max_pages=max_pages, max_records=max_records, **filters
    )


def get_data(lmk_key: str, certificate_type: str, endpoint: str) -> pd.DataFrame:
    """Retrieve one certificate or its recommendations with the shared client."""
    return get_default_client().get_data(lmk_key, certificate_type, endpoint)


def get_meta() -> Dict[str, Any]:
    """Retrieve API metadata with the shared client."""
    return get_default_client().get_meta()


__all__ = [
    "OpenDataCommunitiesClient",
    "get_api_url",
    "get_default_client",
    "reset_default_client",
    "search_data",
    "get_data",
    "get_meta",
]
