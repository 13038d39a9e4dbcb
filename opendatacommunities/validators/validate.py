"""
Validation of search filter parameters.

Filter names are accepted in underscore or hyphen form and normalized to the
hyphenated wire format (``local_authority`` becomes ``local-authority``). The
reserved ``size`` parameter is checked and defaulted here.
"""

import numbers
from typing import Any, Dict, Mapping, Optional

from ..core.config import MESSAGES, PAGINATION
from ..core.errors import EmptyFilterError, InvalidSizeError
from ..core.events import EventType, SearchObserver, emit
from ..core.logging import get_logger


logger = get_logger(__name__)


def normalize_filter_names(filters: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Replace underscores with hyphens in every filter name.

    Applying it twice gives the same result as applying it once.

    Args:
        filters: Filter names mapped to their values

    Returns:
        New dictionary with hyphenated names, in the original order
    """
    return {str(name).replace("_", "-"): value for name, value in filters.items()}


def validate_size(
    params: Mapping[str, Any], observer: Optional[SearchObserver] = None
) -> Dict[str, Any]:
    """
    Validate and default the ``size`` parameter, normalizing filter names.

    Args:
        params: Query parameters, in underscore or hyphen form
        observer: Receives a SIZE_CLAMPED event when size is capped

    Returns:
        Normalized parameters with a valid ``size``

    Raises:
        InvalidSizeError: If size is not a number or is below 1
    """
    params = normalize_filter_names(params)
    size = params.get("size")

    if size is not None:
        if isinstance(size, bool) or not isinstance(size, numbers.Real):
            raise InvalidSizeError(MESSAGES["INVALID_SIZE"], {"size": size})
        if size < PAGINATION["MIN_PAGE_SIZE"]:
            raise InvalidSizeError(MESSAGES["INVALID_SIZE"], {"size": size})

        # Anything above the limit is clamped, infinity included
        if size > PAGINATION["MAX_PAGE_SIZE"]:
            emit(
                observer,
                EventType.SIZE_CLAMPED,
                MESSAGES["SIZE_CLAMPED"],
                requested=size,
                applied=PAGINATION["MAX_PAGE_SIZE"],
            )
            size = PAGINATION["MAX_PAGE_SIZE"]
        elif not float(size).is_integer():
            raise InvalidSizeError(MESSAGES["INVALID_SIZE"], {"size": size})

        params["size"] = int(size)
    else:
        params["size"] = PAGINATION["DEFAULT_PAGE_SIZE"]

    return params


def validate_filters(
    filters: Optional[Mapping[str, Any]], observer: Optional[SearchObserver] = None
) -> Dict[str, Any]:
    """
    Check that filters were supplied, then validate them.

    Interactive search needs at least one parameter; whole datasets are
    retrieved through the bulk download functions instead.

    Args:
        filters: Filter names mapped to their values
        observer: Receives a SIZE_CLAMPED event when size is capped

    Returns:
        Normalized parameters ready for query-string encoding

    Raises:
        EmptyFilterError: If no filters were supplied
        InvalidSizeError: If size is invalid
    """
    if not filters:
        raise EmptyFilterError(MESSAGES["EMPTY_FILTERS"])

    params = validate_size(filters, observer=observer)
    logger.debug(f"Validated search parameters: {params}")
    return params
