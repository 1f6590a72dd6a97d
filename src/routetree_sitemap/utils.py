"""Utility functions for the sitemap generator."""

import logging
import os
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def to_iso8601(value: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC timestamp with millisecond
    precision, e.g. ``2024-01-15T10:30:00.000Z``. Naive datetimes are
    taken as local time.
    """
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def get_current_timestamp() -> str:
    """Get current timestamp in ISO format for sitemaps."""
    return to_iso8601(datetime.now(timezone.utc))


def format_number(number: int) -> str:
    """Format number with thousands separators."""
    return f"{number:,}"


def create_directory_if_not_exists(directory: str) -> None:
    """Create directory if it doesn't exist."""
    if directory:
        os.makedirs(directory, exist_ok=True)


# Characters outside the XML 1.0 Char production
_XML_INVALID_CHARS = re.compile(
    r"[^\t\n\r\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


def clean_xml_text(text: str) -> str:
    """Remove characters that cannot appear in an XML 1.0 document."""
    return _XML_INVALID_CHARS.sub("", text)


def format_priority(priority: float) -> str:
    """
    Format a priority with one decimal digit, rounding halves up.

    Rounds the exact binary value, so 0.25 becomes ``0.3`` while 0.15
    (stored as 0.1499...) becomes ``0.1``.
    """
    return str(Decimal(priority).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
