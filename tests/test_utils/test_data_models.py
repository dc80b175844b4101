"""
Tests for data models.
"""

import pytest

from five_min_case.utils.data_models import (
    Brief5Min,
    CaseParties,
    CaseRecord,
    KeyQuote,
    NewsItem,
)
from five_min_case.utils.exceptions import ValidationError


class TestCaseParties:
    """Tests for CaseParties model."""

    def test_to_dict_omits_missing_parties(self):
        """Test only the parties that were found are serialized."""
        parties = CaseParties(title="Rao v. Union of India", appellant="Rao", respondent="Union of India")
        assert parties.to_dict() == {
            "title": "Rao v. Union of India",
            "appellant": "Rao",
            "respondent": "Union of India",
        }

    def test_from_dict_rejects_non_object(self):
        """Test parties must be an object."""
        with pytest.raises(ValidationError):
            CaseParties.from_dict("Rao v. Union of India")


class TestBrief5Min:
    """Tests for Brief5Min model."""

    def test_to_dict_has_every_section(self):
        """Test all five sections are present, empty or not."""
        brief = Brief5Min(facts="Tenant evicted.")
        assert brief.to_dict() == {
            "facts": "Tenant evicted.",
            "issues": "",
            "holding": "",
            "reasoning": "",
            "disposition": "",
        }

    def test_from_dict_none(self):
        """Test a missing brief becomes an empty one."""
        assert Brief5Min.from_dict(None) == Brief5Min()


class TestCaseRecord:
    """Tests for CaseRecord model."""

    def test_to_dict_uses_camel_case(self, sample_case):
        """Test the JSON shape read by the UI."""
        data = sample_case.to_dict()

        assert data["reporterCitations"] == ["(2025) 3 SCC 101"]
        assert data["keyQuotes"] == [{"quote": "Notice is the soul of fairness.", "pin": "¶12"}]
        assert data["parties"]["appellant"] == "Dept. of Law"
        assert data["brief5min"]["holding"] == "Notice is mandatory."
        assert "judges" not in data
        assert "neutralCitation" not in data
        assert "createdAt" not in data

    def test_from_dict_restores_record(self, sample_case):
        """Test a serialized case loads back to an equal record."""
        assert CaseRecord.from_dict(sample_case.to_dict()) == sample_case

    def test_from_dict_missing_fields(self):
        """Test missing required fields are all reported."""
        with pytest.raises(ValidationError) as exc_info:
            CaseRecord.from_dict({"id": "1", "court": "Delhi High Court"})

        assert set(exc_info.value.fields) == {"jurisdiction", "date", "parties", "source", "url"}

    def test_validate_reports_bad_fields(self, sample_case):
        """Test validation lists every offending field."""
        sample_case.jurisdiction = "FR"
        sample_case.date = "yesterday-ish"
        sample_case.source = "blog"

        with pytest.raises(ValidationError) as exc_info:
            sample_case.validate()

        assert exc_info.value.fields == ["jurisdiction", "date", "source"]

    def test_validate_requires_http_url(self, sample_case):
        """Test the dedup key must be an absolute URL."""
        sample_case.url = "/doc/123456/"
        with pytest.raises(ValidationError, match="url"):
            sample_case.validate()

    def test_malformed_key_quote(self, sample_case):
        """Test key quotes need quote text."""
        data = sample_case.to_dict()
        data["keyQuotes"] = [{"pin": "¶3"}]
        with pytest.raises(ValidationError):
            CaseRecord.from_dict(data)

    def test_title_property(self, sample_case):
        """Test the title comes from the parties."""
        assert sample_case.title == "Dept. of Law v. Rao"

    def test_case_record_string_representation(self, sample_case):
        """Test string representation of a case."""
        assert str(sample_case) == (
            "Case: Dept. of Law v. Rao | Court: Supreme Court of India | "
            "Date: 2025-09-01 | ID: 123456"
        )


class TestKeyQuote:
    """Tests for KeyQuote model."""

    def test_pin_omitted_when_missing(self):
        """Test quotes without a pin serialize without one."""
        assert KeyQuote(quote="Justice delayed.").to_dict() == {"quote": "Justice delayed."}


class TestNewsItem:
    """Tests for NewsItem model."""

    def test_to_dict(self, sample_news):
        """Test the JSON shape of a news item."""
        data = sample_news.to_dict()
        assert data["publishedDate"] == "2025-09-01T10:15:00.000Z"
        assert data["category"] == "General"
        assert "imageUrl" not in data

    def test_from_dict_restores_item(self, sample_news):
        """Test a serialized item loads back to an equal item."""
        assert NewsItem.from_dict(sample_news.to_dict()) == sample_news

    def test_invalid_published_date(self, sample_news):
        """Test the publish date must parse."""
        sample_news.published_date = "not a date"
        with pytest.raises(ValidationError) as exc_info:
            sample_news.validate()
        assert exc_info.value.fields == ["publishedDate"]

    def test_from_dict_missing_fields(self):
        """Test missing fields are reported."""
        with pytest.raises(ValidationError) as exc_info:
            NewsItem.from_dict({"id": "x", "title": "t"})
        assert "url" in exc_info.value.fields
