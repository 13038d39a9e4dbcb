"""
Validated search options with Pydantic.

Pagination options arrive from keyword arguments and the command line; this
model checks them once before a search starts.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .config import PAGINATION
from .errors import ValidationError
from .types import PaginationMode


class SearchOptions(BaseModel):
    """Pagination options of a search"""

    model_config = ConfigDict(frozen=True)  # Immutable after creation

    paginate: PaginationMode = Field(default=PaginationMode.NONE, description="Pagination mode")
    max_pages: Optional[int] = Field(ge=1, default=None, description="Maximum pages to fetch")
    max_records: Optional[int] = Field(ge=1, default=None, description="Maximum records to return")
    page_delay: float = Field(
        ge=0,
        default_factory=lambda: PAGINATION["PAGE_DELAY"],
        description="Pause between pages in seconds",
    )


def parse_search_options(**options) -> SearchOptions:
    """
    Build SearchOptions, translating pydantic errors.

    Raises:
        ValidationError: If an option is out of range or of the wrong type
    """
    try:
        return SearchOptions(**options)
    except PydanticValidationError as e:
        problems = {
            ".".join(str(part) for part in error["loc"]): error["msg"] for error in e.errors()
        }
        raise ValidationError("Invalid search options", problems) from e
