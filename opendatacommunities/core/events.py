"""
Progress and notice events emitted during a search.

Informational messages (page progress, stop reasons, clamped parameters) are
delivered to an observer callable instead of being printed, so callers and
tests can react to them. The default observer writes them to the package log.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .logging import get_logger


logger = get_logger(__name__)


class EventType(str, Enum):
    """Kinds of search events."""

    SIZE_CLAMPED = "size_clamped"
    PAGINATE_FORCED = "paginate_forced"
    PAGE_FETCHED = "page_fetched"
    EMPTY_PAGE = "empty_page"
    MAX_PAGES_REACHED = "max_pages_reached"
    MAX_RECORDS_REACHED = "max_records_reached"
    EXHAUSTED = "exhausted"
    END_OF_DATA = "end_of_data"
    MORE_RESULTS = "more_results"
    TRIMMED = "trimmed"
    COMPLETED = "completed"


# Events logged at WARNING instead of INFO
WARNING_EVENTS = {EventType.SIZE_CLAMPED}


@dataclass(frozen=True)
class SearchEvent:
    """
    A single notice emitted during a search.

    Attributes:
        type: Kind of event
        message: Human readable description
        data: Structured values behind the message (counts, tokens, limits)
    """

    type: EventType
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


SearchObserver = Callable[[SearchEvent], None]


def logging_observer(event: SearchEvent) -> None:
    """Write an event to the package log."""
    level = logging.WARNING if event.type in WARNING_EVENTS else logging.INFO
    logger.log(level, event.message)


class EventCollector:
    """
    Observer that records every event it receives.

    Useful for callers that want to inspect what happened during a search,
    for example to read the continuation token of a manual search.
    """

    def __init__(self, forward: Optional[SearchObserver] = None):
        self.events: List[SearchEvent] = []
        self.forward = forward

    def __call__(self, event: SearchEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            self.forward(event)

    def of_type(self, event_type: EventType) -> List[SearchEvent]:
        return [event for event in self.events if event.type == event_type]

    def types(self) -> List[EventType]:
        return [event.type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


def emit(
    observer: Optional[SearchObserver], event_type: EventType, message: str, **data: Any
) -> SearchEvent:
    """
    Build an event and hand it to the observer.

    Falls back to the logging observer when no observer is given.

    Returns:
        The emitted event
    """
    event = SearchEvent(type=event_type, message=message, data=data)
    (observer or logging_observer)(event)
    return event
