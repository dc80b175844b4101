"""
Tests for record normalization.
"""

import random

import pytest
from datetime import datetime, timezone

from five_min_case.normalize import (
    clean_summary,
    extract_court,
    extract_date,
    extract_parties,
    generate_case_id,
    generate_news_id,
    normalize_courtlistener_case,
    normalize_items,
    normalize_kanoon_case,
    normalize_news_item,
    normalize_rss_case,
)
from five_min_case.sources.descriptors import (
    CourtListenerDescriptor,
    IndianKanoonDescriptor,
    WebFeedDescriptor,
)
from five_min_case.utils.exceptions import ValidationError


class TestExtractParties:
    """Tests for extract_parties function."""

    @pytest.mark.parametrize(
        "title,appellant,respondent",
        [
            ("Dept. of Law v. Rao", "Dept. of Law", "Rao"),
            ("State of Punjab vs Singh", "State of Punjab", "Singh"),
            ("State of Punjab Vs. Singh", "State of Punjab", "Singh"),
            ("Union of India versus Sharma", "Union of India", "Sharma"),
        ],
    )
    def test_party_patterns(self, title, appellant, respondent):
        """Test each separator style splits the parties."""
        parties = extract_parties(title)
        assert parties.title == title
        assert parties.appellant == appellant
        assert parties.respondent == respondent

    def test_no_match(self):
        """Test a title without a separator keeps only the title."""
        parties = extract_parties("  In Re: Guidelines on Bail  ")
        assert parties.title == "In Re: Guidelines on Bail"
        assert parties.appellant is None
        assert parties.respondent is None


class TestExtractCourt:
    """Tests for extract_court function."""

    def test_kanoon_docsource_year_stripped(self):
        """Test the trailing year is dropped from an API docsource."""
        assert extract_court("indiankanoon", {"docsource": "Delhi High Court 2025"}) == "Delhi High Court"

    def test_kanoon_feed_url(self):
        """Test the court is read from the feed URL."""
        raw = {"link": "https://indiankanoon.org/doc/1/", "feedUrl": "https://indiankanoon.org/feeds/bombayhc.xml"}
        assert extract_court("indiankanoon", raw) == "Bombay High Court"

    def test_kanoon_unknown(self):
        """Test an unrecognised Indian Kanoon item defaults to High Court."""
        assert extract_court("indiankanoon", {"link": "https://indiankanoon.org/doc/1/"}) == "High Court"

    def test_other_sources(self):
        """Test the fixed labels for other sources."""
        assert extract_court("courtlistener", {"court": "Ninth Circuit"}) == "Ninth Circuit"
        assert extract_court("courtlistener", {}) == "Federal Court"
        assert extract_court("judiciary-uk", {}) == "UK Courts"
        assert extract_court("somewhere", {}) == "Court"


class TestExtractDate:
    """Tests for extract_date function."""

    def test_published_rfc822(self):
        """Test an RSS publish date is used first."""
        assert extract_date("Mon, 01 Sep 2025 00:00:00 GMT") == "2025-09-01T00:00:00.000Z"

    def test_published_day_first(self):
        """Test DD-MM-YYYY is read day first."""
        assert extract_date("03-09-2025") == "2025-09-03T00:00:00.000Z"

    def test_metadata_date(self):
        """Test a DD-MM-YYYY date in the metadata text is the second choice."""
        assert extract_date(None, "Judgment dated 15-08-2024 by the bench") == "2024-08-15T00:00:00.000Z"

    def test_title_year(self):
        """Test a year in the title becomes January 1 of that year."""
        assert extract_date(None, None, "Rao v. State, 2019") == "2019-01-01T00:00:00.000Z"

    def test_unparseable_published_falls_through(self):
        """Test a garbage publish date does not stop the fallback chain."""
        assert extract_date("sometime soon", None, "Rao v. State 2021") == "2021-01-01T00:00:00.000Z"

    def test_now(self, fixed_now):
        """Test the run time is the last resort."""
        assert extract_date(None, None, "Rao v. State", now=fixed_now) == "2025-09-02T06:30:00.000Z"

    def test_partial_published_date_uses_run_day(self, fixed_now):
        """Test fields missing from a partial date come from the run day, not the clock."""
        assert extract_date("12", now=fixed_now) == "2025-09-12T00:00:00.000Z"
        assert extract_date("5 March", now=fixed_now) == "2025-03-05T00:00:00.000Z"


class TestCleanSummary:
    """Tests for clean_summary function."""

    def test_truncates_to_300(self):
        """Test long HTML content is stripped and capped with an ellipsis."""
        summary = clean_summary("<p>" + "a" * 400 + "</p>")
        assert len(summary) == 300
        assert summary.endswith("...")
        assert "<" not in summary

    def test_short_content_untouched(self):
        """Test short content only loses its markup."""
        assert clean_summary("<b>Bail</b>   granted") == "Bail granted"


class TestIds:
    """Tests for id generation."""

    def test_news_id_is_stable(self):
        """Test the same URL always gives the same id."""
        url = "https://www.livelaw.in/top-stories/a"
        assert generate_news_id(url) == generate_news_id(url)
        assert len(generate_news_id(url)) == 12

    def test_news_id_distinguishes_similar_urls(self):
        """Test URLs sharing a long prefix get different ids."""
        first = generate_news_id("https://www.livelaw.in/top-stories/story-one")
        second = generate_news_id("https://www.livelaw.in/top-stories/story-two")
        assert first != second

    def test_case_id_format(self):
        """Test synthesized case ids carry the month and court."""
        case_id = generate_case_id("2025-09-01T00:00:00.000Z", "UK Courts", random.Random(7))
        prefix, suffix = case_id[:-5], case_id[-4:]
        assert prefix == "2025-09-UKC"
        assert len(suffix) == 4
        assert suffix.isalnum()


class TestNormalizeRecords:
    """Tests for the per-source normalizers."""

    def test_rss_case_end_to_end(self, kanoon_feed, fixed_now):
        """Test an Indian Kanoon feed item becomes a full case."""
        raw = {
            "title": "Dept. of Law v. Rao",
            "link": "https://indiankanoon.org/doc/123456/",
            "pubDate": "Mon, 01 Sep 2025 00:00:00 GMT",
            "contentSnippet": "Appeal on eviction.",
            "feedUrl": kanoon_feed.url,
        }

        case = normalize_rss_case(raw, kanoon_feed, now=fixed_now)

        assert case.id == "123456"
        assert case.date == "2025-09-01T00:00:00.000Z"
        assert case.court == "Supreme Court of India"
        assert case.jurisdiction == "IN"
        assert case.source == "indiankanoon"
        assert case.parties.appellant == "Dept. of Law"
        assert case.parties.respondent == "Rao"
        assert case.tldr60 == ""
        assert case.tags == []

    def test_rss_case_without_doc_id(self, fixed_now):
        """Test items from other feeds get a synthesized id."""
        descriptor = WebFeedDescriptor(
            name="UK Judiciary", url="https://www.judiciary.uk/feed/", jurisdiction="UK", source="judiciary-uk"
        )
        raw = {"title": "R v Smith", "link": "https://www.judiciary.uk/judgments/r-v-smith/", "pubDate": None}

        case = normalize_rss_case(raw, descriptor, now=fixed_now, rng=random.Random(1))

        assert case.id.startswith("2025-09-UKC-")
        assert case.court == "UK Courts"
        assert case.date == "2025-09-02T06:30:00.000Z"

    def test_rss_case_missing_link(self, kanoon_feed):
        """Test an item without a link is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            normalize_rss_case({"title": "A v. B", "link": None}, kanoon_feed)
        assert exc_info.value.fields == ["link"]

    def test_kanoon_document(self, fixed_now):
        """Test an API document becomes a case."""
        descriptor = IndianKanoonDescriptor(name="Kerala", doctypes="kerala")
        doc = {
            "tid": 98765,
            "title": "State Of Kerala v. Joseph on 1 September, 2025",
            "docsource": "Kerala High Court",
            "publishdate": "2025-09-01",
            "headline": "reported in (2025) 4 SCC 210",
            "bench": "A. Kumar, B. Rao",
        }

        case = normalize_kanoon_case(doc, descriptor, now=fixed_now)

        assert case.id == "98765"
        assert case.url == "https://indiankanoon.org/doc/98765/"
        assert case.court == "Kerala High Court"
        assert case.date == "2025-09-01T00:00:00.000Z"
        assert case.parties.appellant == "State Of Kerala"
        assert case.judges == ["A. Kumar", "B. Rao"]
        assert case.reporter_citations == ["(2025) 4 SCC 210"]

    def test_courtlistener_result(self, fixed_now):
        """Test a CourtListener search result becomes a case."""
        descriptor = CourtListenerDescriptor(name="Federal", courts=["scotus"])
        item = {
            "caseName": "Smith v. Jones",
            "dateFiled": "2025-09-01",
            "court": "Supreme Court of the United States",
            "absolute_url": "/opinion/123/smith-v-jones/",
            "cluster_id": 123,
            "citation": ["600 U.S. 1"],
            "judge": "Roberts",
        }

        case = normalize_courtlistener_case(item, descriptor, now=fixed_now)

        assert case.id == "cl-123"
        assert case.url == "https://www.courtlistener.com/opinion/123/smith-v-jones/"
        assert case.jurisdiction == "US"
        assert case.court == "Supreme Court of the United States"
        assert case.reporter_citations == ["600 U.S. 1"]

    def test_news_item(self, news_feed, fixed_now):
        """Test a news feed item becomes a news item with a capped summary."""
        raw = {
            "title": "  Supreme Court stays demolition  ",
            "link": "https://www.livelaw.in/top-stories/stay",
            "pubDate": "Mon, 01 Sep 2025 10:15:00 GMT",
            "contentSnippet": "<p>" + "b" * 400 + "</p>",
            "creator": "Staff",
            "enclosureUrl": "https://www.livelaw.in/img.jpg",
        }

        item = normalize_news_item(raw, news_feed, now=fixed_now)

        assert item.title == "Supreme Court stays demolition"
        assert item.source == "LiveLaw"
        assert item.category == "General"
        assert item.published_date == "2025-09-01T10:15:00.000Z"
        assert len(item.summary) == 300
        assert item.summary.endswith("...")
        assert item.id == generate_news_id("https://www.livelaw.in/top-stories/stay")
        assert item.author == "Staff"
        assert item.image_url == "https://www.livelaw.in/img.jpg"

    def test_normalize_items_skips_malformed(self, kanoon_feed, fixed_now):
        """Test bad items are dropped and the rest kept in order."""
        raw_items = [
            {"title": "A v. B", "link": "https://indiankanoon.org/doc/1/", "pubDate": None},
            {"title": None, "link": "https://indiankanoon.org/doc/2/"},
            "not a dict",
            {"title": "C v. D", "link": "https://indiankanoon.org/doc/3/", "pubDate": None},
        ]

        records = normalize_items(raw_items, kanoon_feed, now=fixed_now)

        assert [r.id for r in records] == ["1", "3"]
