"""Response normalization utilities."""

from .normalize import clean_frame, clean_name, clean_names, process_search_response, records_to_frame


__all__ = ["clean_name", "clean_names", "clean_frame", "records_to_frame", "process_search_response"]
