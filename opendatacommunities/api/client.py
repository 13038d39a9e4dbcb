"""
Client for the Open Data Communities energy certificate API.

The client holds the HTTP session, credentials, timeout and the observer that
receives search progress events. Search runs through the paginated search
loop; the other endpoints are single requests.
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
import requests

from ..core.config import API, MESSAGES, PAGINATION
from ..core.credentials import Credentials
from ..core.errors import DataError, ValidationError
from ..core.events import EventType, SearchObserver, emit
from ..core.logging import get_logger
from ..core.schema import parse_search_options
from ..core.types import PaginationMode
from ..data import download
from ..utils.data.normalize import parse_json_body, records_to_frame
from ..utils.network.pagination import PaginatedSearch, finalize_search_results
from ..utils.network.request import build_and_execute_request, build_headers, perform_request
from ..validators.validate import normalize_filter_names, validate_filters
from .urls import get_api_url, join_url, normalize_certificate_type


logger = get_logger(__name__)


class OpenDataCommunitiesClient:
    """
    Client for Open Data Communities data access.

    Attributes:
        credentials: Explicit credentials; the default credential store is used when None
        session: HTTP session shared by all requests of the client
        timeout: Request timeout in seconds
        observer: Receives search events; events are logged when None
        base_url: API root URL
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        observer: Optional[SearchObserver] = None,
        base_url: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            credentials: Explicit credentials (default: credential store)
            session: HTTP session (default: a new requests.Session)
            timeout: Request timeout in seconds (default: from config)
            observer: Search event observer (default: log events)
            base_url: API root URL (default: from config)
        """
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout or API["TIMEOUT"]
        self.observer = observer
        self.base_url = (base_url or API["BASE_URL"]).rstrip("/")

        logger.debug(f"Initialized OpenDataCommunitiesClient with timeout={self.timeout}")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "OpenDataCommunitiesClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        authenticate: bool = True,
        accept_json: bool = True,
        stream: bool = False,
    ) -> requests.Response:
        request = requests.Request(
            method="GET",
            url=url,
            params=params,
            headers=build_headers(self.credentials, authenticate=authenticate, accept_json=accept_json),
        ).prepare()
        return perform_request(self.session, request, timeout=self.timeout, stream=stream)

    def search(
        self,
        certificate_type: str,
        paginate: Union[PaginationMode, str] = PaginationMode.NONE,
        max_pages: Optional[int] = None,
        max_records: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        page_delay: Optional[float] = None,
        **filters: Any,
    ) -> pd.DataFrame:
        """
        Search energy performance and display energy certificates.

        Args:
            certificate_type: ``domestic``, ``non_domestic`` or ``display``
            paginate: ``none`` (first page only), ``all`` (every page) or
                ``manual`` (first page, token reported through a MORE_RESULTS event)
            max_pages: Maximum pages to fetch
            max_records: Maximum records to return; forces ``paginate="all"``
                whatever mode was passed
            cancel_event: Set it from another thread to cancel the search
            page_delay: Pause between pages in seconds (default: from config)
            **filters: Search filters such as ``postcode``, ``address``,
                ``local_authority``, ``from_date``, ``size``; pass
                ``search_after`` to resume a manual search

        Returns:
            DataFrame of matching records with snake_case columns

        Raises:
            ValidationError: For missing or invalid filters and options
            AuthError: If no credentials are available
            NoResultsError: If nothing matches the filters
            TransportError: If a request fails
            SearchCancelledError: If the search was cancelled
        """
        # A manual search resumes from a token the caller got from a previous call;
        # the token is not a filter
        filters = normalize_filter_names(filters)
        start_token = filters.pop(PAGINATION["TOKEN_PARAM"], None)

        query_params = validate_filters(filters, observer=self.observer)
        api_url = get_api_url(certificate_type, "search", base_url=self.base_url)

        options = parse_search_options(
            paginate=paginate,
            max_pages=max_pages,
            max_records=max_records,
            **({} if page_delay is None else {"page_delay": page_delay}),
        )
        mode = options.paginate

        if options.max_records is not None and mode is not PaginationMode.ALL:
            mode = PaginationMode.ALL
            emit(
                self.observer,
                EventType.PAGINATE_FORCED,
                "Setting paginate = `all` because max_records is specified.",
                max_records=options.max_records,
                requested=options.paginate.value,
            )

        def fetch_page(params: Dict[str, Any], search_after: Optional[str]) -> requests.Response:
            return build_and_execute_request(
                self.session,
                api_url,
                params,
                search_after=search_after,
                credentials=self.credentials,
                timeout=self.timeout,
            )

        paginator = PaginatedSearch(
            fetch_page=fetch_page,
            query_params=query_params,
            paginate=mode,
            max_pages=options.max_pages,
            max_records=options.max_records,
            observer=self.observer,
            page_delay=options.page_delay,
            cancel_event=cancel_event,
        )
        paginator.state.search_after = start_token

        state = paginator.run()
        return finalize_search_results(state, options.max_records, observer=self.observer)

    def get_data(self, lmk_key: Optional[str], certificate_type: str, endpoint: str) -> pd.DataFrame:
        """
        Retrieve one certificate or its recommendations by LMK key.

        Args:
            lmk_key: Landmark identifier of the certificate
            certificate_type: ``domestic``, ``non_domestic`` or ``display``
            endpoint: ``certificate`` or ``recommendation``

        Returns:
            DataFrame with the requested records

        Raises:
            ValidationError: For the search endpoint or a missing LMK key
        """
        if endpoint == "search":
            raise ValidationError(MESSAGES["USE_SEARCH"])

        if not lmk_key:
            raise ValidationError(MESSAGES["MISSING_LMK_KEY"])

        url = join_url(get_api_url(certificate_type, endpoint, base_url=self.base_url), lmk_key)
        response = self._get(url)
        return records_to_frame(parse_json_body(response))

    def get_meta(self) -> Dict[str, Any]:
        """
        Retrieve API metadata such as ``latestDate`` and ``updatedDate``.

        This endpoint does not require authentication.
        """
        response = self._get(join_url(self.base_url, API["INFO_PATH"]), authenticate=False)
        payload = parse_json_body(response)
        if not isinstance(payload, dict):
            raise DataError("Unexpected metadata payload", {"type": type(payload).__name__})
        return payload

    def get_file_list(self) -> pd.DataFrame:
        """
        List the files available for bulk download.

        Returns:
            DataFrame with ``file_name`` and ``size`` (bytes) columns
        """
        response = self._get(join_url(self.base_url, API["FILES_PATH"]))
        return download.files_to_frame(parse_json_body(response))

    def get_file(
        self, certificate_type: Optional[str] = None, local_authority_code: Optional[str] = None
    ) -> pd.DataFrame:
        """
        List bulk files filtered by certificate type and/or local authority.

        Args:
            certificate_type: ``domestic``, ``non_domestic`` or ``display``
            local_authority_code: Local authority code, e.g. ``E08000025``

        Returns:
            DataFrame with ``file_name`` and ``size`` columns; empty when nothing matches
        """
        if certificate_type is not None:
            certificate_type = normalize_certificate_type(certificate_type)
        return download.filter_files(self.get_file_list(), certificate_type, local_authority_code)

    def download_file(self, file_name: str, path: Union[str, Path]) -> Path:
        """
        Stream one bulk file to disk.

        Args:
            file_name: Name of the file on the server
            path: Local path to write to

        Returns:
            Path of the written file
        """
        path = Path(path)
        url = join_url(self.base_url, API["FILES_PATH"], file_name)
        response = self._get(url, accept_json=False, stream=True)

        try:
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=API["DOWNLOAD_CHUNK_SIZE"]):
                    if chunk:
                        f.write(chunk)
        finally:
            response.close()

        logger.debug(f"Downloaded {file_name} to {path} ({os.path.getsize(path)} bytes)")
        return path

    def bulk_download(
        self,
        file_name: str,
        destination_path: Union[str, Path],
        resource: str = "certificate",
        keep_zip: bool = False,
    ) -> Path:
        """Download a bulk archive and extract one resource CSV; see data.download.bulk_download."""
        return download.bulk_download(self, file_name, destination_path, resource, keep_zip)

    def get_schema(self, certificate_type: str, resource: str = "certificate") -> pd.DataFrame:
        """Describe the columns of a resource; see data.download.get_schema."""
        return download.get_schema(self, certificate_type, resource)
