"""
Configuration settings for Open Data Communities API access.

This module defines configuration settings for the API endpoints, pagination,
request timeouts, credentials and bulk downloads. It provides a central
location for all configuration values used throughout the package.
"""

import os
from typing import Any, Dict


# API configuration
API = {
    # Root of every versioned endpoint
    "BASE_URL": "https://epc.opendatacommunities.org/api/v1",
    # Request timeout in seconds
    "TIMEOUT": 60,
    # Accepted response type for JSON endpoints
    "ACCEPT": "application/json",
    # Unauthenticated metadata endpoint, relative to BASE_URL
    "INFO_PATH": "info",
    # File listing and bulk download endpoint, relative to BASE_URL
    "FILES_PATH": "files",
    # Chunk size in bytes for streamed downloads
    "DOWNLOAD_CHUNK_SIZE": 1024 * 1024,
}

# Pagination configuration
PAGINATION = {
    # Default page size when the caller does not pass one
    "DEFAULT_PAGE_SIZE": 25,
    # Smallest page size accepted by the API
    "MIN_PAGE_SIZE": 1,
    # Largest page size accepted by the API
    "MAX_PAGE_SIZE": 5000,
    # Pause in seconds between consecutive page requests
    "PAGE_DELAY": 0.05,
    # Query parameter carrying the continuation token
    "TOKEN_PARAM": "search-after",
    # Response header carrying the next continuation token
    "TOKEN_HEADER": "X-Next-Search-After",
    # Key of the records array in search and certificate responses
    "ROWS_KEY": "rows",
}

# Supported certificate types, endpoints and pagination modes
CERTIFICATE_TYPES = ("domestic", "non_domestic", "display")
ENDPOINTS = ("certificate", "recommendation", "search")
PAGINATION_MODES = ("none", "all", "manual")

# Credential configuration
CREDENTIALS = {
    # Pre-encoded base64 "user:key" credential
    "ENCODED_KEY_ENV": "ODC_API_KEY",
    # Plain username and key, encoded on first use
    "USER_ENV": "ODC_USER",
    "KEY_ENV": "ODC_KEY",
    # Load a .env file from the working directory before reading the environment
    "LOAD_DOTENV": True,
}

# Bulk download configuration
BULK = {
    # Resources that can be extracted from a bulk archive
    "RESOURCES": ("certificate", "recommendation"),
    # Name of the schema document inside every archive
    "SCHEMA_MEMBER": "schema.json",
}

# Archives used for schema introspection, one per certificate type
SCHEMA_FILES = {
    "domestic": "domestic-2025-10.zip",
    "non_domestic": "non-domestic-2025-10.zip",
    "display": "display-2025-10.zip",
}

# Display configuration for the command line interface
DISPLAY = {
    "TABLE_FORMAT": "simple",
    "MAX_ROWS": 50,
    "MAX_COLUMN_WIDTH": 40,
}

# Messages shown to users
MESSAGES = {
    "EMPTY_FILTERS": (
        "Please, provide additional filtering parameters. If you want to retrieve all "
        "data for a particular certificate type or local authority, please use "
        "bulk_download and its associated functions."
    ),
    "INVALID_SIZE": "size must be between 1 and 5000.",
    "SIZE_CLAMPED": "Limit for size exceeded: applied 5000 as fallback value.",
    "NO_RESULTS": "No results matching the filtering criteria were found.",
    "NO_API_KEY": "No API key found. Please, set it up via set_key or the ODC_API_KEY variable.",
    "KEY_EXISTS": "An API key is already stored. Set overwrite=True to replace it.",
    "MISSING_CREDENTIALS": "Please, provide your OpenDataCommunity username & API key.",
    "USE_SEARCH": "Please use the search function for the search endpoint.",
    "MISSING_LMK_KEY": "lmk_key is not set: please, provide a valid value.",
}


# Load environment variables if needed
def load_env_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Returns:
        Dictionary containing configuration values from environment variables
    """
    config = {}

    # API settings
    if "ODC_BASE_URL" in os.environ:
        config["API.BASE_URL"] = os.environ["ODC_BASE_URL"].rstrip("/")

    if "ODC_API_TIMEOUT" in os.environ:
        config["API.TIMEOUT"] = int(os.environ["ODC_API_TIMEOUT"])

    # Pagination settings
    if "ODC_PAGE_DELAY" in os.environ:
        config["PAGINATION.PAGE_DELAY"] = float(os.environ["ODC_PAGE_DELAY"])

    return config


# Apply environment variable configuration
ENV_CONFIG = load_env_config()


# Update configuration with environment variables
def apply_env_config(env_config: Dict[str, Any]) -> None:
    """
    Apply environment variable configuration.

    Args:
        env_config: Dictionary containing configuration values from environment variables
    """
    for key, value in env_config.items():
        parts = key.split(".")
        if len(parts) == 2:
            module_name, setting_name = parts
            if module_name in globals() and setting_name in globals()[module_name]:
                globals()[module_name][setting_name] = value


# Apply environment configuration
apply_env_config(ENV_CONFIG)
