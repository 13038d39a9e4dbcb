"""
Core data types for Open Data Communities searches.

This module defines the data structures shared by the pagination loop and
the response normalizer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pandas as pd


class PaginationMode(str, Enum):
    """
    How many pages a search retrieves.

    NONE fetches a single page, MANUAL fetches a single page and reports the
    continuation token, ALL keeps fetching until a stop condition is met.
    """

    NONE = "none"
    ALL = "all"
    MANUAL = "manual"


@dataclass
class Page:
    """
    One HTTP response worth of records.

    Attributes:
        records: Records of the page with snake-case column names
        token: Continuation token for the next page, if the API sent one
    """

    records: pd.DataFrame = field(default_factory=pd.DataFrame)
    token: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


@dataclass
class PaginationState:
    """
    Mutable state of one paginated search.

    Owned by a single PaginatedSearch for the duration of one call.
    ``total_records`` always equals the number of rows held in ``pages``.

    Attributes:
        page_count: Loop iterations so far, including the one that stopped the loop
        total_records: Records accumulated across all pages
        search_after: Token to send with the next request
        pages: Accumulated page tables, in arrival order
        should_continue: Whether another iteration will run
        next_token: Last token returned by the API, kept for manual pagination
    """

    page_count: int = 0
    total_records: int = 0
    search_after: Optional[str] = None
    pages: List[pd.DataFrame] = field(default_factory=list)
    should_continue: bool = True
    next_token: Optional[str] = None

    def add_page(self, page: Page) -> None:
        self.pages.append(page.records)
        self.total_records += page.count
        self.next_token = page.token
