"""
Helper functions for the five-min-case pipeline.
"""

import re
import logging
from datetime import datetime, timezone
from typing import Optional, Union
from bs4 import BeautifulSoup
from dateutil import parser as date_parser


def validate_date(
    date_input: Union[str, datetime, None], default: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Validate and convert date input to a timezone-aware UTC datetime.

    Naive values are taken to be UTC.

    Args:
        date_input: Date as string, datetime object, or None
        default: Supplies any fields a partial date string leaves out;
            the current day when omitted

    Returns:
        datetime object or None

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_input is None:
        return None

    if isinstance(date_input, datetime):
        parsed = date_input
    elif isinstance(date_input, str):
        try:
            parsed = date_parser.parse(date_input, default=default)
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"Invalid date format: {date_input}") from e
    else:
        raise ValueError(f"Unsupported date type: {type(date_input)}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    This is the timestamp shape every stored record and index file uses.
    """
    value = validate_date(value)
    millis = value.microsecond // 1000
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def day_key(value: Union[str, datetime]) -> str:
    """Calendar day (``YYYY-MM-DD``) of an ISO timestamp or datetime."""
    if isinstance(value, datetime):
        return to_iso(value)[:10]
    return value.split("T")[0][:10]


def strip_html(text: str) -> str:
    """Remove tags and unescape entities, leaving raw text."""
    if not text:
        return ""
    return BeautifulSoup(text, "lxml").get_text()


def sanitize_text(text: str) -> str:
    """
    Clean and sanitize text content from scraped data.

    Args:
        text: Raw text to sanitize

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    text = re.sub(r"\s+", " ", text.strip())

    # Entities that survived parsing
    html_entities = {
        "&nbsp;": " ",
        "&amp;": "&",
        "&lt;": "<",
        "&gt;": ">",
        "&quot;": '"',
        "&#39;": "'",
        "&apos;": "'",
    }

    for entity, replacement in html_entities.items():
        text = text.replace(entity, replacement)

    text = re.sub(r"[\f\x0c\u00a0]", " ", text)

    # Normalize quotes
    text = re.sub(r"[\u201c\u201d\u201e]", '"', text)
    text = re.sub(r"[\u2018\u2019\u201a]", "'", text)

    text = re.sub(r"\s+", " ", text).strip()

    return text


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Set up a logger for the pipeline.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def extract_case_id_from_url(url: str, pattern: str) -> Optional[str]:
    """
    Extract case ID from URL using regex pattern.

    Args:
        url: URL to extract from
        pattern: Regex pattern to match case ID

    Returns:
        Extracted case ID or None
    """
    if not url or not pattern:
        return None

    match = re.search(pattern, url)
    return match.group(1) if match else None
