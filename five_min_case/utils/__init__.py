"""
Utilities for the five-min-case pipeline.
"""

from .base import BaseFetcher, SourceFetcher
from .exceptions import (
    PipelineError,
    NetworkError,
    RateLimitError,
    ParsingError,
    AuthenticationError,
    DataNotFoundError,
    ValidationError,
    StoreError,
    ConflictError,
    ConfigurationError,
)
from .data_models import CaseRecord, CaseParties, Brief5Min, KeyQuote, NewsItem
from .helpers import validate_date, sanitize_text, setup_logger, to_iso, utc_now

__all__ = [
    "BaseFetcher",
    "SourceFetcher",
    "CaseRecord",
    "CaseParties",
    "Brief5Min",
    "KeyQuote",
    "NewsItem",
    "PipelineError",
    "NetworkError",
    "RateLimitError",
    "ParsingError",
    "AuthenticationError",
    "DataNotFoundError",
    "ValidationError",
    "StoreError",
    "ConflictError",
    "ConfigurationError",
    "validate_date",
    "sanitize_text",
    "setup_logger",
    "to_iso",
    "utc_now",
]
