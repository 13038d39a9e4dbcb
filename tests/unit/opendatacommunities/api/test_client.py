"""
Tests for OpenDataCommunitiesClient.

The client is built on a mock session, so the tests check the requests it
prepares and the DataFrames it returns.
"""

import threading
from unittest.mock import patch

import pandas as pd
import pytest

from opendatacommunities.api import get_default_client, reset_default_client
from opendatacommunities.api.client import OpenDataCommunitiesClient
from opendatacommunities.core.config import MESSAGES
from opendatacommunities.core.errors import (
    AuthError,
    DataError,
    EmptyFilterError,
    InvalidSizeError,
    NoResultsError,
    SearchCancelledError,
    ValidationError,
)
from opendatacommunities.core.events import EventType


def sent_requests(mock_session):
    return [call[0][0] for call in mock_session.send.call_args_list]


class TestSearch:
    """Test OpenDataCommunitiesClient.search."""

    def test_single_page(self, client, mock_session, make_page):
        mock_session.send.side_effect = [make_page(3, token="A")]

        result = client.search("domestic", postcode="SW1A 1AA")

        assert len(result) == 3
        assert list(result.columns) == ["lmk_key", "address", "current_energy_rating"]
        request = sent_requests(mock_session)[0]
        assert request.url.startswith("https://epc.opendatacommunities.org/api/v1/domestic/search?")
        assert "postcode=SW1A+1AA" in request.url
        assert "size=25" in request.url
        assert request.headers["Authorization"].startswith("Basic ")

    def test_filters_hyphenated(self, client, mock_session, make_page):
        mock_session.send.side_effect = [make_page(1)]

        client.search("non_domestic", local_authority="E09000030")

        request = sent_requests(mock_session)[0]
        assert "/non-domestic/search?" in request.url
        assert "local-authority=E09000030" in request.url

    def test_max_records_forces_all(self, client, mock_session, events, make_page):
        mock_session.send.side_effect = [
            make_page(25, 0, token="A"),
            make_page(25, 25, token="B"),
        ]

        result = client.search("domestic", max_records=45, local_authority="E09000030")

        assert len(result) == 45
        assert events.types()[0] is EventType.PAGINATE_FORCED
        second = sent_requests(mock_session)[1]
        assert "search-after=A" in second.url
        assert "size=20" in second.url

    def test_max_records_overrides_manual(self, client, mock_session, events, make_page):
        mock_session.send.side_effect = [
            make_page(25, 0, token="A"),
            make_page(25, 25, token="B"),
        ]

        result = client.search("domestic", paginate="manual", max_records=45, postcode="M1")

        assert mock_session.send.call_count == 2
        assert len(result) == 45
        forced = events.of_type(EventType.PAGINATE_FORCED)
        assert len(forced) == 1
        assert forced[0].data["requested"] == "manual"
        assert EventType.MORE_RESULTS not in events.types()

    def test_max_records_with_all_not_reported(self, client, mock_session, events, make_page):
        mock_session.send.side_effect = [make_page(10)]

        client.search("domestic", paginate="all", max_records=10, postcode="M1")

        assert EventType.PAGINATE_FORCED not in events.types()

    def test_all_pages(self, client, mock_session, make_page):
        mock_session.send.side_effect = [
            make_page(25, 0, token="A"),
            make_page(25, 25, token="B"),
            make_page(10, 50),
        ]

        result = client.search("display", paginate="all", address="Manchester")

        assert len(result) == 60
        assert mock_session.send.call_count == 3

    def test_manual_resume(self, client, mock_session, events, make_page):
        mock_session.send.side_effect = [make_page(25, token="next"), make_page(5, 25)]

        first = client.search("domestic", paginate="manual", postcode="M1")
        token = events.of_type(EventType.MORE_RESULTS)[0].data["token"]
        second = client.search("domestic", paginate="manual", postcode="M1", search_after=token)

        assert len(first) == 25
        assert len(second) == 5
        assert "search-after=next" in sent_requests(mock_session)[1].url
        assert "search-after" not in sent_requests(mock_session)[0].url

    def test_size_clamped(self, client, mock_session, events, make_page):
        mock_session.send.side_effect = [make_page(2)]

        client.search("domestic", postcode="M1", size=10000)

        assert "size=5000" in sent_requests(mock_session)[0].url
        assert EventType.SIZE_CLAMPED in events.types()

    def test_no_filters(self, client, mock_session):
        with pytest.raises(EmptyFilterError):
            client.search("domestic")

        mock_session.send.assert_not_called()

    @pytest.mark.parametrize("token_name", ["search_after", "search-after"])
    def test_token_alone_is_not_a_filter(self, client, mock_session, token_name):
        with pytest.raises(EmptyFilterError):
            client.search("domestic", **{token_name: "tok"})

        mock_session.send.assert_not_called()

    def test_invalid_size(self, client, mock_session):
        with pytest.raises(InvalidSizeError):
            client.search("domestic", postcode="M1", size=0)

        mock_session.send.assert_not_called()

    def test_invalid_type(self, client, mock_session):
        with pytest.raises(ValidationError):
            client.search("commercial", postcode="M1")

        mock_session.send.assert_not_called()

    def test_invalid_options(self, client, mock_session):
        with pytest.raises(ValidationError):
            client.search("domestic", paginate="sometimes", postcode="M1")

        mock_session.send.assert_not_called()

    def test_no_results(self, client, mock_session, make_response):
        mock_session.send.side_effect = [make_response(content=b"")]

        with pytest.raises(NoResultsError) as excinfo:
            client.search("domestic", postcode="ZZ99")

        assert excinfo.value.message == MESSAGES["NO_RESULTS"]

    def test_not_found_is_no_results(self, client, mock_session, make_response):
        mock_session.send.side_effect = [make_response(status_code=404, content=b"Not found")]

        with pytest.raises(NoResultsError):
            client.search("domestic", postcode="ZZ99")

    def test_unauthorized(self, client, mock_session, make_response):
        mock_session.send.side_effect = [make_response(status_code=401, content=b"Unauthorized")]

        with pytest.raises(AuthError):
            client.search("domestic", postcode="M1")

    def test_cancelled(self, client, mock_session):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(SearchCancelledError):
            client.search("domestic", postcode="M1", cancel_event=cancel_event)

        mock_session.send.assert_not_called()

    def test_missing_credentials(self, mock_session, events):
        client = OpenDataCommunitiesClient(session=mock_session, observer=events)

        with patch("opendatacommunities.utils.network.request.default_store") as mock_store:
            mock_store.get_credentials.side_effect = AuthError(MESSAGES["NO_API_KEY"])
            with pytest.raises(AuthError):
                client.search("domestic", postcode="M1")

        mock_session.send.assert_not_called()


class TestGetData:
    """Test OpenDataCommunitiesClient.get_data."""

    def test_certificate(self, client, mock_session, make_response, make_rows):
        mock_session.send.return_value = make_response(json_body={"rows": make_rows(1)})

        result = client.get_data("abc123", "domestic", "certificate")

        assert result["lmk_key"].tolist() == ["key-0"]
        assert sent_requests(mock_session)[0].url == (
            "https://epc.opendatacommunities.org/api/v1/domestic/certificate/abc123"
        )

    def test_recommendations(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(
            json_body={"rows": [{"lmk-key": "abc", "improvement-item": 1}]}
        )

        result = client.get_data("abc", "non_domestic", "recommendation")

        assert list(result.columns) == ["lmk_key", "improvement_item"]
        assert sent_requests(mock_session)[0].url.endswith("/non-domestic/recommendations/abc")

    def test_search_endpoint_rejected(self, client):
        with pytest.raises(ValidationError) as excinfo:
            client.get_data("abc", "domestic", "search")

        assert excinfo.value.message == MESSAGES["USE_SEARCH"]

    def test_missing_lmk_key(self, client):
        with pytest.raises(ValidationError) as excinfo:
            client.get_data(None, "domestic", "certificate")

        assert excinfo.value.message == MESSAGES["MISSING_LMK_KEY"]


class TestGetMeta:
    """Test OpenDataCommunitiesClient.get_meta."""

    def test_meta_unauthenticated(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(
            json_body={"latestDate": "2025-09-30", "updatedDate": "2025-10-20"}
        )

        meta = client.get_meta()

        assert meta["latestDate"] == "2025-09-30"
        request = sent_requests(mock_session)[0]
        assert request.url == "https://epc.opendatacommunities.org/api/v1/info"
        assert "Authorization" not in request.headers

    def test_meta_unexpected_payload(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=["not", "a", "dict"])

        with pytest.raises(DataError):
            client.get_meta()


class TestFiles:
    """Test the file listing methods."""

    LISTING = {
        "files": {
            "domestic-E08000025.zip": {"size": 1000},
            "domestic-E09000030.zip": {"size": 2000},
            "non-domestic-E08000025.zip": {"size": 300},
            "display-E08000025.zip": 40,
        }
    }

    def test_get_file_list(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=self.LISTING)

        files = client.get_file_list()

        assert list(files.columns) == ["file_name", "size"]
        assert len(files) == 4
        assert files.loc[files["file_name"] == "display-E08000025.zip", "size"].iloc[0] == 40

    def test_get_file_by_type(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=self.LISTING)

        files = client.get_file("domestic")

        assert files["file_name"].tolist() == ["domestic-E08000025.zip", "domestic-E09000030.zip"]

    def test_get_file_by_type_and_authority(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=self.LISTING)

        files = client.get_file("non-domestic", "E08000025")

        assert files["file_name"].tolist() == ["non-domestic-E08000025.zip"]

    def test_get_file_by_authority(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=self.LISTING)

        files = client.get_file(local_authority_code="E08000025")

        assert len(files) == 3

    def test_get_file_no_match(self, client, mock_session, make_response):
        mock_session.send.return_value = make_response(json_body=self.LISTING)

        files = client.get_file("display", "W06000001")

        assert isinstance(files, pd.DataFrame)
        assert files.empty

    def test_download_file(self, client, mock_session, make_response, tmp_path):
        mock_session.send.return_value = make_response(content=b"zip-bytes")

        path = client.download_file("domestic-E08000025.zip", tmp_path / "out.zip")

        assert path.read_bytes() == b"zip-bytes"
        request = sent_requests(mock_session)[0]
        assert request.url.endswith("/files/domestic-E08000025.zip")
        assert mock_session.send.call_args[1]["stream"] is True


class TestClientLifecycle:
    """Test client construction and the default client."""

    def test_context_manager_closes_session(self, credentials, mock_session):
        with OpenDataCommunitiesClient(credentials=credentials, session=mock_session):
            pass

        mock_session.close.assert_called_once()

    def test_default_client_singleton(self):
        reset_default_client()
        try:
            assert get_default_client() is get_default_client()
        finally:
            reset_default_client()

    def test_search_data_uses_default_client(self):
        from opendatacommunities.api import search_data

        with patch("opendatacommunities.api.get_default_client") as mock_get:
            mock_get.return_value.search.return_value = pd.DataFrame({"lmk_key": ["a"]})

            result = search_data("domestic", postcode="M1")

        assert len(result) == 1
        mock_get.return_value.search.assert_called_once_with(
            "domestic", paginate="none", max_pages=None, max_records=None, postcode="M1"
        )
