"""
Source descriptors and fetchers for the five-min-case pipeline.
"""

from typing import Dict, List, Any

from .descriptors import (
    RSSFeedDescriptor,
    WebFeedDescriptor,
    IndianKanoonDescriptor,
    CourtListenerDescriptor,
)
from .rss import RSSFeedFetcher
from .indian_kanoon import IndianKanoonFetcher
from .courtlistener import CourtListenerFetcher


def fetch_source(descriptor, fetchers: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Fetch raw items for a descriptor with the fetcher registered for its kind.

    Args:
        descriptor: Any source descriptor
        fetchers: Mapping of descriptor kind to fetcher instance

    Returns:
        Raw items; empty if the source failed

    Raises:
        KeyError: If no fetcher is registered for the descriptor's kind
    """
    try:
        fetcher = fetchers[descriptor.kind]
    except KeyError:
        raise KeyError(f"No fetcher registered for {descriptor.kind!r} sources") from None
    return fetcher.fetch(descriptor)


__all__ = [
    "RSSFeedDescriptor",
    "WebFeedDescriptor",
    "IndianKanoonDescriptor",
    "CourtListenerDescriptor",
    "RSSFeedFetcher",
    "IndianKanoonFetcher",
    "CourtListenerFetcher",
    "fetch_source",
]
