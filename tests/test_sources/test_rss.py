"""
Tests for the RSS/Atom feed fetcher.
"""

import requests

from five_min_case.sources import RSSFeedFetcher
from five_min_case.sources.descriptors import WebFeedDescriptor


class TestRSSFeedFetcher:
    """Tests for RSSFeedFetcher."""

    def test_parse_rss_items(self, mock_session, make_response, sample_rss, kanoon_feed):
        """Test RSS items are flattened to raw dicts."""
        mock_session.request.return_value = make_response(200, content=sample_rss)

        items = RSSFeedFetcher().fetch(kanoon_feed)

        assert len(items) == 2
        first = items[0]
        assert first["title"] == "Dept. of Law v. Rao"
        assert first["link"] == "https://indiankanoon.org/doc/123456/"
        assert first["pubDate"] == "Mon, 01 Sep 2025 00:00:00 GMT"
        assert first["contentSnippet"] == "Appeal on eviction & notice."
        assert first["creator"] == "Registry"
        assert first["categories"] == ["Civil"]
        assert first["feedUrl"] == kanoon_feed.url
        assert items[1]["creator"] is None

    def test_parse_atom_entries(self, mock_session, make_response, sample_atom):
        """Test Atom entries use the alternate link and published date."""
        mock_session.request.return_value = make_response(200, content=sample_atom)
        descriptor = WebFeedDescriptor(
            name="UK Judiciary",
            url="https://www.judiciary.uk/feed/",
            jurisdiction="UK",
            source="judiciary-uk",
        )

        items = RSSFeedFetcher().fetch(descriptor)

        assert len(items) == 1
        assert items[0]["title"] == "R v Smith"
        assert items[0]["link"] == "https://www.judiciary.uk/judgments/r-v-smith/"
        assert items[0]["pubDate"] == "2025-09-01T10:00:00Z"
        assert items[0]["author"] == "Judicial Office"
        assert items[0]["contentSnippet"] == "Sentencing remarks."

    def test_limit(self, mock_session, make_response, sample_rss, kanoon_feed):
        """Test only the first descriptor.limit items are kept."""
        mock_session.request.return_value = make_response(200, content=sample_rss)
        kanoon_feed.limit = 1

        items = RSSFeedFetcher().fetch(kanoon_feed)

        assert [item["title"] for item in items] == ["Dept. of Law v. Rao"]

    def test_not_a_feed(self, mock_session, make_response, kanoon_feed):
        """Test an HTML page in place of a feed yields nothing."""
        mock_session.request.return_value = make_response(
            200, content=b"<html><body><p>Service unavailable</p></body></html>"
        )
        assert RSSFeedFetcher().fetch(kanoon_feed) == []

    def test_http_error(self, mock_session, make_response, kanoon_feed):
        """Test a failing feed yields nothing."""
        mock_session.request.return_value = make_response(503)
        assert RSSFeedFetcher().fetch(kanoon_feed) == []

    def test_network_error(self, mock_session, kanoon_feed):
        """Test transport errors are isolated to the source."""
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")
        assert RSSFeedFetcher().fetch(kanoon_feed) == []

    def test_raw_ampersand_kept(self, mock_session, make_response, kanoon_feed):
        """Test an unescaped ampersand in a title survives parsing."""
        mock_session.request.return_value = make_response(200, content=b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Feed</title>
<item><title>Raw & ampersand v. Lee</title><link>https://indiankanoon.org/doc/9/</link></item>
</channel></rss>""")

        items = RSSFeedFetcher().fetch(kanoon_feed)

        assert items[0]["title"] == "Raw & ampersand v. Lee"
        assert items[0]["link"] == "https://indiankanoon.org/doc/9/"

    def test_enclosure_and_media(self, mock_session, make_response, news_feed):
        """Test image URLs come from enclosures, then media tags."""
        mock_session.request.return_value = make_response(200, content=b"""<?xml version="1.0"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/"><channel><title>News</title>
<item><title>One</title><link>https://x/1</link>
<enclosure url="https://x/1.jpg" type="image/jpeg" length="10"/></item>
<item><title>Two</title><link>https://x/2</link>
<media:thumbnail url="https://x/2.jpg"/></item>
<item><title>Three</title><link>https://x/3</link></item>
</channel></rss>""")

        items = RSSFeedFetcher().fetch(news_feed)

        assert [item["enclosureUrl"] for item in items] == ["https://x/1.jpg", "https://x/2.jpg", None]

    def test_empty_body(self, mock_session, make_response, kanoon_feed):
        """Test an empty response yields nothing."""
        mock_session.request.return_value = make_response(200, content=b"")
        assert RSSFeedFetcher().fetch(kanoon_feed) == []
