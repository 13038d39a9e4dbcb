"""
Normalization of API responses into DataFrames.

The API returns records as JSON objects with camelCase or hyphenated keys.
This module turns them into DataFrames with snake_case column names and
extracts the continuation token of search responses.
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import requests

from ...core.config import PAGINATION
from ...core.errors import DataError
from ...core.logging import get_logger
from ...core.types import Page


logger = get_logger(__name__)

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^0-9a-zA-Z]+")


def clean_name(name: Any) -> str:
    """
    Convert a column name to snake_case.

    Examples:
        ``lmkKey`` -> ``lmk_key``, ``co2-emissions-current`` ->
        ``co2_emissions_current``, ``UPRN Source`` -> ``uprn_source``

    Args:
        name: Original column name

    Returns:
        Cleaned column name, prefixed with ``x`` when it would start with a digit
    """
    text = str(name)
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _NON_ALNUM.sub("_", text).strip("_").lower()

    if not text:
        return "x"
    if text[0].isdigit():
        return f"x{text}"
    return text


def clean_names(names: Iterable[Any], allow_dupes: bool = False) -> List[str]:
    """
    Clean a sequence of column names.

    Duplicates produced by cleaning get a numeric suffix (``name_2``,
    ``name_3``) unless ``allow_dupes`` is set.
    """
    cleaned = [clean_name(name) for name in names]
    if allow_dupes:
        return cleaned

    seen: Dict[str, int] = {}
    unique = []
    for name in cleaned:
        if name in seen:
            seen[name] += 1
            unique.append(f"{name}_{seen[name]}")
        else:
            seen[name] = 1
            unique.append(name)
    return unique


def clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of the DataFrame with cleaned column names."""
    df = df.copy()
    df.columns = clean_names(df.columns)
    return df


def records_to_frame(payload: Any) -> pd.DataFrame:
    """
    Convert a parsed API payload into a DataFrame.

    Args:
        payload: Parsed JSON body; records are read from its ``rows`` array

    Returns:
        DataFrame with snake_case columns, empty when there are no rows
    """
    rows = []
    if isinstance(payload, dict):
        rows = payload.get(PAGINATION["ROWS_KEY"]) or []

    if not rows:
        return pd.DataFrame()

    return clean_frame(pd.DataFrame.from_records(rows))


def parse_json_body(response: requests.Response) -> Any:
    """
    Parse the JSON body of a response.

    Raises:
        DataError: If the body is not valid JSON
    """
    try:
        return response.json()
    except (ValueError, json.JSONDecodeError) as e:
        raise DataError(
            "Failed to parse JSON response",
            {"status_code": response.status_code, "error": str(e)},
        ) from e


def _is_empty_payload(payload: Any) -> bool:
    if not payload:
        return True
    if isinstance(payload, dict):
        rows = payload.get(PAGINATION["ROWS_KEY"])
        return not rows or not rows[0]
    return False


def extract_token(response: requests.Response) -> Optional[str]:
    """Read the continuation token header; blank values count as absent."""
    token = response.headers.get(PAGINATION["TOKEN_HEADER"])
    if token is None or not str(token).strip():
        return None
    return str(token).strip()


def process_search_response(response: requests.Response) -> Page:
    """
    Turn one search response into a Page.

    An empty body, an empty payload, no rows or an empty first row all give
    an empty page without a token.

    Args:
        response: Response of a search request

    Returns:
        Page with the records and the next continuation token

    Raises:
        DataError: If a non-empty body is not valid JSON
    """
    if not response.content or not response.content.strip():
        return Page()

    payload = parse_json_body(response)
    if _is_empty_payload(payload):
        return Page()

    records = records_to_frame(payload)
    token = extract_token(response)
    logger.debug(f"Normalized page with {len(records)} records, next token: {token}")
    return Page(records=records, token=token)
