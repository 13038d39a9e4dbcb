"""
Global pytest fixtures for opendatacommunities tests.

Requests never leave the process: sessions are mocks and responses are
built in memory.
"""

import io
import json
import zipfile
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from opendatacommunities.api.client import OpenDataCommunitiesClient
from opendatacommunities.core import config
from opendatacommunities.core.credentials import Credentials
from opendatacommunities.core.events import EventCollector


SEARCH_URL = "https://epc.opendatacommunities.org/api/v1/domestic/search"


def build_response(
    status_code: int = 200,
    json_body: Any = None,
    content: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
    url: str = SEARCH_URL,
) -> requests.Response:
    """Build an in-memory requests.Response."""
    response = requests.Response()
    response.status_code = status_code
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
    response._content = content if content is not None else b""
    response._content_consumed = True
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    response.url = url
    return response


def build_rows(count: int, start: int = 0) -> List[Dict[str, str]]:
    """Build search rows in the API's camelCase shape."""
    return [
        {
            "lmkKey": f"key-{i}",
            "address": f"{i} Test St",
            "currentEnergyRating": "C",
        }
        for i in range(start, start + count)
    ]


def build_page(count: int, start: int = 0, token: Optional[str] = None) -> requests.Response:
    """Build one search page response, with an optional continuation token."""
    headers = {"X-Next-Search-After": token} if token else {}
    return build_response(json_body={"rows": build_rows(count, start)}, headers=headers)


def build_zip(members: Dict[str, str]) -> bytes:
    """Build a ZIP archive in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, text in members.items():
            archive.writestr(name, text)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def no_page_delay(monkeypatch):
    """Skip the pause between pages."""
    monkeypatch.setitem(config.PAGINATION, "PAGE_DELAY", 0)


@pytest.fixture
def credentials():
    """Explicit test credentials."""
    return Credentials.from_user_key("user@example.com", "secret")


@pytest.fixture
def events():
    """Observer that records search events."""
    return EventCollector()


@pytest.fixture
def mock_session():
    """Mock HTTP session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(credentials, mock_session, events):
    """Client wired to the mock session and event collector."""
    return OpenDataCommunitiesClient(credentials=credentials, session=mock_session, observer=events)


@pytest.fixture
def make_response():
    """Factory for in-memory responses."""
    return build_response


@pytest.fixture
def make_rows():
    """Factory for search rows."""
    return build_rows


@pytest.fixture
def make_page():
    """Factory for search page responses."""
    return build_page


@pytest.fixture
def make_zip():
    """Factory for in-memory ZIP archives."""
    return build_zip
