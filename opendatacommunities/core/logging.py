"""
Logging configuration for Open Data Communities API access.

This module provides the logging setup used across the package:
- Basic and dictConfig-based configuration
- Log level management and debug helpers
- A filter that masks Basic-Authentication credentials in log records
"""

import logging
import logging.config
import os
import re
import sys
from typing import Any, Dict, List, Optional, Union


# Default logging formats
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"

PACKAGE_LOGGER = "opendatacommunities"

_BASIC_AUTH_PATTERN = re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+")


class SensitiveDataFilter(logging.Filter):
    """Filter that masks Basic-Authentication credentials in log messages."""

    def filter(self, record):
        if isinstance(record.msg, str) and "Basic" in record.msg:
            record.msg = _BASIC_AUTH_PATTERN.sub(r"\1***", record.msg)
        return True


def _to_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    console: bool = True,
) -> None:
    """
    Set up basic logging configuration.

    Args:
        log_level: Logging level (default: INFO)
        log_file: Path to log file (default: None)
        log_format: Logging format string (default: None)
        console: Whether to log to console (default: True)
    """
    log_level = _to_level(log_level)

    if log_format is None:
        log_format = DEFAULT_FORMAT

    handlers = []

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.addFilter(SensitiveDataFilter())
        handlers.append(console_handler)

    logging.basicConfig(level=log_level, format=log_format, handlers=handlers if handlers else None)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        file_handler.addFilter(SensitiveDataFilter())
        logging.root.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured with level: {logging.getLevelName(log_level)}")
    if log_file:
        logger.debug(f"Log file: {log_file}")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    console_level: Optional[Union[int, str]] = None,
    format_string: Optional[str] = None,
    debug: bool = False,
) -> None:
    """
    Configure logging for the package with advanced options.

    Args:
        level: Base logging level (default: INFO)
        log_file: Path to log file (default: None)
        console: Whether to log to console (default: True)
        console_level: Console logging level (default: same as base level)
        format_string: Log format string (default: DEFAULT_FORMAT or DEBUG_FORMAT if debug=True)
        debug: Whether to enable debug mode (more verbose logging)
    """
    level = _to_level(level)
    console_level = level if console_level is None else _to_level(console_level)

    if format_string is None:
        format_string = DEBUG_FORMAT if debug else DEFAULT_FORMAT

    handlers: List[Dict[str, Any]] = []

    if console:
        handlers.append(
            {
                "level": console_level,
                "class": "logging.StreamHandler",
                "formatter": "console",
                "filters": ["sensitive"],
                "stream": sys.stdout,
            }
        )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        handlers.append(
            {
                "level": level,
                "class": "logging.FileHandler",
                "formatter": "detailed",
                "filters": ["sensitive"],
                "filename": log_file,
                "encoding": "utf-8",
            }
        )

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "sensitive": {"()": SensitiveDataFilter},
        },
        "formatters": {
            "detailed": {"format": format_string},
            "console": {"format": CONSOLE_FORMAT},
        },
        "handlers": {},
        "loggers": {
            PACKAGE_LOGGER: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
            # Make third-party libraries less verbose
            "requests": {"level": logging.WARNING, "propagate": True},
            "urllib3": {"level": logging.WARNING, "propagate": True},
        },
    }

    for i, handler in enumerate(handlers):
        handler_name = f"handler_{i}"
        logging_config["handlers"][handler_name] = handler
        logging_config["loggers"][PACKAGE_LOGGER]["handlers"].append(handler_name)

    if handlers:
        logging.config.dictConfig(logging_config)

        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured with level: {logging.getLevelName(level)}")
        if log_file:
            logger.debug(f"Log file: {log_file}")
    else:
        logging.basicConfig(level=level, format=format_string)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    This is the recommended way to get a logger in the package.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_log_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """
    Set the log level for a specific logger or the root logger.

    Args:
        level: Logging level (can be string like 'INFO' or int like logging.INFO)
        logger_name: Name of logger to set level for (default: None, root logger)
    """
    level = _to_level(level)
    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()
    logger.setLevel(level)


def enable_debug_for_module(module_name: str) -> None:
    """
    Enable debug logging for a specific module.

    Args:
        module_name: Name of the module to enable debug for
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        handler.addFilter(SensitiveDataFilter())
        logger.addHandler(handler)

