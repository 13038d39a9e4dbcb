"""
Pagination utilities for API searches.

This module drives cursor-based searches: it computes page sizes, decides
whether another page is needed, runs the page loop and combines the pages
into one DataFrame.

The loop is sequential. Each request starts after the previous response has
been processed, with a short pause between pages. The pause waits on a
``threading.Event`` so that a search can be cancelled from another thread.
"""

import threading
from typing import Any, Callable, Dict, Mapping, Optional, Union

import pandas as pd
import requests

from ...core.config import MESSAGES, PAGINATION
from ...core.errors import NoResultsError, ResourceNotFoundError, SearchCancelledError
from ...core.events import EventType, SearchObserver, emit
from ...core.logging import get_logger
from ...core.types import PaginationMode, PaginationState
from ..data.normalize import process_search_response


logger = get_logger(__name__)

# Fetches one page given the query parameters and the continuation token
PageFetcher = Callable[[Dict[str, Any], Optional[str]], requests.Response]


def calculate_page_size(base_size: int, max_records: Optional[int], total_records: int) -> int:
    """
    Calculate how many records to request for the next page.

    Args:
        base_size: Standard page size
        max_records: Maximum total records, None for no limit
        total_records: Records already retrieved

    Returns:
        Records to request; 0 when max_records has been reached

    Example:
        calculate_page_size(250, 1000, 800) -> 200
    """
    if max_records is None:
        return base_size

    records_needed = max_records - total_records
    if records_needed <= 0:
        return 0

    return min(base_size, records_needed)


def should_continue_search(
    paginate: Union[PaginationMode, str],
    max_records: Optional[int],
    total_records: int,
    page_record_count: int,
    requested_size: int,
    next_search_after: Optional[str],
    observer: Optional[SearchObserver] = None,
) -> bool:
    """
    Decide whether another page should be fetched.

    Conditions are checked in order: mode ``none`` stops; mode ``manual``
    stops and reports the token if there is one; mode ``all`` stops when the
    record ceiling is reached, when no token was returned, or when the page
    was shorter than requested. Unknown modes stop.

    Args:
        paginate: Pagination mode
        max_records: Maximum total records, None for no limit
        total_records: Records retrieved so far
        page_record_count: Records in the current page
        requested_size: Records requested for the current page
        next_search_after: Token returned with the current page
        observer: Receives the stop-reason events

    Returns:
        True if another page should be fetched
    """
    try:
        mode = PaginationMode(paginate)
    except ValueError:
        logger.warning(f"Unknown pagination mode {paginate!r}, stopping")
        return False

    if mode is PaginationMode.NONE:
        return False

    if mode is PaginationMode.MANUAL:
        if next_search_after is not None:
            emit(
                observer,
                EventType.MORE_RESULTS,
                f"More results available. Next search-after token: {next_search_after}",
                token=next_search_after,
            )
        return False

    if max_records is not None and total_records >= max_records:
        emit(
            observer,
            EventType.MAX_RECORDS_REACHED,
            f"Reached max_records limit ({max_records}).",
            max_records=max_records,
            total_records=total_records,
        )
        return False

    if next_search_after is None:
        emit(
            observer,
            EventType.EXHAUSTED,
            f"Retrieved all available results ({total_records} records).",
            total_records=total_records,
        )
        return False

    if page_record_count < requested_size:
        emit(
            observer,
            EventType.END_OF_DATA,
            f"Reached end of available data ({total_records} records).",
            total_records=total_records,
        )
        return False

    return True


class PaginatedSearch:
    """
    Runs the page loop of one search.

    Each call to ``step`` performs one iteration and returns whether another
    one should follow; ``run`` steps until done and returns the final state.
    A PaginatedSearch is single use.

    Attributes:
        fetch_page: Sends one request for the given parameters and token
        query_params: Validated query parameters; ``size`` is the base page size
        paginate: Pagination mode
        max_pages: Maximum pages to fetch, None for no limit
        max_records: Maximum records to fetch, None for no limit
        page_delay: Pause in seconds between pages
        cancel_event: When set, the search stops with SearchCancelledError
        state: Pagination state of the search
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        query_params: Mapping[str, Any],
        paginate: Union[PaginationMode, str] = PaginationMode.NONE,
        max_pages: Optional[int] = None,
        max_records: Optional[int] = None,
        observer: Optional[SearchObserver] = None,
        page_delay: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.fetch_page = fetch_page
        self.query_params = dict(query_params)
        self.paginate = paginate
        self.max_pages = max_pages
        self.max_records = max_records
        self.observer = observer
        self.page_delay = PAGINATION["PAGE_DELAY"] if page_delay is None else page_delay
        self.cancel_event = cancel_event or threading.Event()
        self.state = PaginationState()

        logger.debug(
            f"Initialized paginated search with paginate={paginate}, "
            f"max_pages={max_pages}, max_records={max_records}"
        )

    @property
    def base_size(self) -> int:
        return self.query_params.get("size", PAGINATION["DEFAULT_PAGE_SIZE"])

    def _check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise SearchCancelledError(
                "Search cancelled",
                {"page_count": self.state.page_count, "total_records": self.state.total_records},
            )

    def _stop(self) -> bool:
        self.state.should_continue = False
        return False

    def _fetch(self, params: Dict[str, Any]) -> requests.Response:
        try:
            return self.fetch_page(params, self.state.search_after)
        except ResourceNotFoundError as e:
            if self.state.page_count == 1:
                raise NoResultsError(MESSAGES["NO_RESULTS"], e.details) from e
            raise

    def step(self) -> bool:
        """
        Run one iteration of the page loop.

        Returns:
            True if another iteration should run

        Raises:
            NoResultsError: If the first page has no records
            TransportError: If a request fails
            SearchCancelledError: If the cancel event is set
        """
        if not self.state.should_continue:
            return False

        state = self.state
        state.page_count += 1

        if self.max_pages is not None and state.page_count > self.max_pages:
            emit(
                self.observer,
                EventType.MAX_PAGES_REACHED,
                f"Reached max_pages limit ({self.max_pages}).",
                max_pages=self.max_pages,
            )
            return self._stop()

        current_size = calculate_page_size(self.base_size, self.max_records, state.total_records)
        if current_size <= 0:
            emit(
                self.observer,
                EventType.MAX_RECORDS_REACHED,
                f"Reached max_records limit ({self.max_records}).",
                max_records=self.max_records,
                total_records=state.total_records,
            )
            return self._stop()

        self._check_cancelled()

        params = dict(self.query_params)
        params["size"] = current_size
        response = self._fetch(params)
        page = process_search_response(response)

        if page.is_empty:
            if state.page_count == 1:
                raise NoResultsError(MESSAGES["NO_RESULTS"], {"params": params})
            emit(
                self.observer,
                EventType.EMPTY_PAGE,
                f"Page {state.page_count} returned empty response.",
                page=state.page_count,
            )
            return self._stop()

        state.add_page(page)
        emit(
            self.observer,
            EventType.PAGE_FETCHED,
            f"Page {state.page_count}: {page.count} records (total: {state.total_records})",
            page=state.page_count,
            records=page.count,
            total_records=state.total_records,
        )

        state.should_continue = should_continue_search(
            paginate=self.paginate,
            max_records=self.max_records,
            total_records=state.total_records,
            page_record_count=page.count,
            requested_size=current_size,
            next_search_after=page.token,
            observer=self.observer,
        )

        if state.should_continue:
            state.search_after = page.token
            self._pause()

        return state.should_continue

    def _pause(self) -> None:
        if self.page_delay > 0 and self.cancel_event.wait(self.page_delay):
            self._check_cancelled()

    def run(self) -> PaginationState:
        """
        Run the page loop until a stop condition is met.

        Returns:
            Final pagination state
        """
        while self.step():
            pass

        logger.debug(
            f"Fetched {self.state.page_count} pages with {self.state.total_records} total records"
        )
        return self.state


def finalize_search_results(
    state: PaginationState,
    max_records: Optional[int] = None,
    observer: Optional[SearchObserver] = None,
) -> pd.DataFrame:
    """
    Combine the pages of a search into one DataFrame.

    Rows beyond ``max_records`` are dropped, keeping the original order.

    Args:
        state: Final pagination state
        max_records: Maximum rows to return, None for no limit
        observer: Receives TRIMMED and COMPLETED events

    Returns:
        Combined DataFrame, empty when no pages were retrieved
    """
    if not state.pages:
        return pd.DataFrame()

    if len(state.pages) == 1:
        final_result = state.pages[0]
    else:
        final_result = pd.concat(state.pages, ignore_index=True)

    if max_records is not None and len(final_result) > max_records:
        emit(
            observer,
            EventType.TRIMMED,
            f"Trimming result to exactly {max_records} records.",
            max_records=max_records,
            rows=len(final_result),
        )
        final_result = final_result.iloc[:max_records].reset_index(drop=True)

    emit(
        observer,
        EventType.COMPLETED,
        f"Returning {len(final_result)} records from {state.page_count} page(s).",
        rows=len(final_result),
        pages=state.page_count,
    )
    return final_result
