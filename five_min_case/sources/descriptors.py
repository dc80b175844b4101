"""
Source descriptors.

One dataclass per source kind. The ``kind`` tag selects the fetcher and the
normalizer for the raw items a source yields.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional


@dataclass
class RSSFeedDescriptor:
    """A syndication feed of case judgments or legal news."""

    kind: ClassVar[str] = "rss"

    name: str
    url: str
    record_type: str = "case"
    jurisdiction: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    limit: int = 20


@dataclass
class WebFeedDescriptor(RSSFeedDescriptor):
    """A court website that publishes its judgments as a feed."""

    kind: ClassVar[str] = "web"


@dataclass
class IndianKanoonDescriptor:
    """A doctype query against the Indian Kanoon search API."""

    kind: ClassVar[str] = "indiankanoon"

    name: str
    doctypes: str
    limit: int = 10
    min_docsize: int = 5000
    lookback_days: int = 1
    max_pages: int = 5
    jurisdiction: str = "IN"
    source: str = "indiankanoon"


@dataclass
class CourtListenerDescriptor:
    """A court filter against the CourtListener opinion search API."""

    kind: ClassVar[str] = "courtlistener"

    name: str
    courts: List[str] = field(default_factory=list)
    limit: int = 20
    lookback_days: int = 1
    jurisdiction: str = "US"
    source: str = "courtlistener"
