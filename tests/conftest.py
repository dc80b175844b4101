"""
Pytest configuration and fixtures for the five-min-case tests.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, MagicMock, patch
import requests

from five_min_case.sources.descriptors import RSSFeedDescriptor
from five_min_case.utils.data_models import Brief5Min, CaseParties, CaseRecord, KeyQuote, NewsItem


@pytest.fixture(autouse=True)
def no_sleep():
    """Never sleep for real between requests."""
    with patch("time.sleep") as sleep:
        yield sleep


@pytest.fixture
def fixed_now():
    return datetime(2025, 9, 2, 6, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_session():
    """Patch requests.Session so fetchers get a mock session."""
    with patch("requests.Session") as session_class:
        session = MagicMock()
        session.headers = {}
        session_class.return_value = session
        yield session


@pytest.fixture
def make_response():
    """Factory for mock HTTP responses."""

    def _make(status_code=200, json_data=None, content=b"", headers=None):
        response = Mock(spec=requests.Response)
        response.status_code = status_code
        response.headers = headers or {}
        response.content = content
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return _make


@pytest.fixture
def sample_case():
    """Sample CaseRecord for testing."""
    return CaseRecord(
        id="123456",
        jurisdiction="IN",
        court="Supreme Court of India",
        date="2025-09-01T00:00:00.000Z",
        parties=CaseParties(title="Dept. of Law v. Rao", appellant="Dept. of Law", respondent="Rao"),
        source="indiankanoon",
        url="https://indiankanoon.org/doc/123456/",
        tldr60="The Supreme Court held that a notice must be served before eviction.",
        brief5min=Brief5Min(facts="Tenant evicted.", holding="Notice is mandatory."),
        key_quotes=[KeyQuote(quote="Notice is the soul of fairness.", pin="¶12")],
        tags=["Property", "Administrative"],
        statutes=["Rent Control Act, s. 14"],
        reporter_citations=["(2025) 3 SCC 101"],
    )


@pytest.fixture
def sample_news():
    """Sample NewsItem for testing."""
    return NewsItem(
        id="a1b2c3d4e5f6",
        title="Supreme Court reserves verdict on electoral bonds",
        summary="The bench reserved its verdict after three days of hearings.",
        url="https://www.livelaw.in/top-stories/electoral-bonds-verdict-reserved",
        source="LiveLaw",
        published_date="2025-09-01T10:15:00.000Z",
        category="General",
        author="Staff",
    )


@pytest.fixture
def kanoon_feed():
    return RSSFeedDescriptor(
        name="Indian Kanoon - Supreme Court",
        url="https://indiankanoon.org/feeds/supremecourt.xml",
        jurisdiction="IN",
        source="indiankanoon",
    )


@pytest.fixture
def news_feed():
    return RSSFeedDescriptor(
        name="LiveLaw",
        url="https://www.livelaw.in/rss.xml",
        record_type="news",
        category="General",
    )


@pytest.fixture
def sample_rss():
    """An RSS 2.0 court feed with two judgments."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Supreme Court of India</title>
    <link>https://indiankanoon.org/</link>
    <item>
      <title>Dept. of Law v. Rao</title>
      <link>https://indiankanoon.org/doc/123456/</link>
      <pubDate>Mon, 01 Sep 2025 00:00:00 GMT</pubDate>
      <description>&lt;p&gt;Appeal on eviction &amp;amp; notice.&lt;/p&gt;</description>
      <dc:creator>Registry</dc:creator>
      <category>Civil</category>
    </item>
    <item>
      <title>State of Punjab vs Singh</title>
      <link>https://indiankanoon.org/doc/654321/</link>
      <pubDate>Mon, 01 Sep 2025 09:30:00 GMT</pubDate>
      <description>Criminal appeal.</description>
    </item>
  </channel>
</rss>"""


@pytest.fixture
def sample_atom():
    """An Atom feed with one entry."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Judiciary UK</title>
  <entry>
    <title>R v Smith</title>
    <link rel="alternate" href="https://www.judiciary.uk/judgments/r-v-smith/"/>
    <published>2025-09-01T10:00:00Z</published>
    <summary>Sentencing remarks.</summary>
    <author><name>Judicial Office</name></author>
  </entry>
</feed>"""
