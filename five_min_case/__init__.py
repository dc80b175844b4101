"""
5 Min Case - scrapes court judgments and legal news, summarizes cases and
publishes them to a document store and static index files.
"""

__version__ = "0.1.0"
__description__ = "Legal judgments and legal-news ETL for the 5 Min Case reader"

from .sources import (
    RSSFeedDescriptor,
    WebFeedDescriptor,
    IndianKanoonDescriptor,
    CourtListenerDescriptor,
    RSSFeedFetcher,
    IndianKanoonFetcher,
    CourtListenerFetcher,
    fetch_source,
)

from .utils import (
    CaseRecord,
    CaseParties,
    Brief5Min,
    KeyQuote,
    NewsItem,
    PipelineError,
    NetworkError,
    RateLimitError,
    ParsingError,
    ValidationError,
    StoreError,
    ConflictError,
    ConfigurationError,
    validate_date,
    sanitize_text,
    setup_logger,
)

__all__ = [
    # Sources
    "RSSFeedDescriptor",
    "WebFeedDescriptor",
    "IndianKanoonDescriptor",
    "CourtListenerDescriptor",
    "RSSFeedFetcher",
    "IndianKanoonFetcher",
    "CourtListenerFetcher",
    "fetch_source",
    # Models
    "CaseRecord",
    "CaseParties",
    "Brief5Min",
    "KeyQuote",
    "NewsItem",
    # Errors
    "PipelineError",
    "NetworkError",
    "RateLimitError",
    "ParsingError",
    "ValidationError",
    "StoreError",
    "ConflictError",
    "ConfigurationError",
    # Utilities
    "validate_date",
    "sanitize_text",
    "setup_logger",
]
