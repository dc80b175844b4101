"""
Canonical record shapes for the five-min-case pipeline.

Every source is normalized into either a ``CaseRecord`` or a ``NewsItem``.
``to_dict`` produces the camelCase JSON the reader UI consumes and
``from_dict`` rebuilds (and validates) a record from that JSON.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any

from .exceptions import ValidationError
from .helpers import validate_date

JURISDICTIONS = ("US", "IN", "UK")

CASE_SOURCES = (
    "courtlistener",
    "caselaw",
    "indiankanoon",
    "judiciary-uk",
    "ecourts",
    "sci-official",
)

BRIEF_SECTIONS = ("facts", "issues", "holding", "reasoning", "disposition")


def _is_timestamp(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        validate_date(value)
    except ValueError:
        return False
    return True


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


@dataclass
class CaseParties:
    """Case title plus whatever parties could be split out of it."""

    title: str
    appellant: Optional[str] = None
    respondent: Optional[str] = None
    petitioner: Optional[str] = None
    defendant: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in self.__dict__.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaseParties":
        if not isinstance(data, dict):
            raise ValidationError("parties must be an object", ["parties"])
        return cls(
            title=data.get("title", ""),
            appellant=data.get("appellant"),
            respondent=data.get("respondent"),
            petitioner=data.get("petitioner"),
            defendant=data.get("defendant"),
        )


@dataclass
class Brief5Min:
    """Five-minute structured brief."""

    facts: str = ""
    issues: str = ""
    holding: str = ""
    reasoning: str = ""
    disposition: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in BRIEF_SECTIONS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Brief5Min":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("brief5min must be an object", ["brief5min"])
        return cls(**{name: data.get(name) or "" for name in BRIEF_SECTIONS})


@dataclass
class KeyQuote:
    quote: str
    pin: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        result = {"quote": self.quote}
        if self.pin:
            result["pin"] = self.pin
        return result


@dataclass
class CaseRecord:
    """
    Canonical case judgment.

    ``date`` is an ISO-8601 UTC timestamp string and ``url`` is the dedup
    key. Summary fields start empty and are filled by the summarizer.
    """

    id: str
    jurisdiction: str
    court: str
    date: str
    parties: CaseParties
    source: str
    url: str
    tldr60: str = ""
    brief5min: Brief5Min = field(default_factory=Brief5Min)
    key_quotes: List[KeyQuote] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    statutes: List[str] = field(default_factory=list)
    reporter_citations: List[str] = field(default_factory=list)
    judges: List[str] = field(default_factory=list)
    neutral_citation: Optional[str] = None
    outcome: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def title(self) -> str:
        return self.parties.title

    def validate(self) -> "CaseRecord":
        """
        Check the record against the canonical field set.

        Returns:
            The record itself, for chaining

        Raises:
            ValidationError: Listing every offending field
        """
        bad = []
        if not isinstance(self.id, str) or not self.id:
            bad.append("id")
        if self.jurisdiction not in JURISDICTIONS:
            bad.append("jurisdiction")
        if not isinstance(self.court, str) or not self.court:
            bad.append("court")
        if not _is_timestamp(self.date):
            bad.append("date")
        if not isinstance(self.parties, CaseParties) or not self.parties.title:
            bad.append("parties")
        if self.source not in CASE_SOURCES:
            bad.append("source")
        if not isinstance(self.url, str) or not self.url.startswith("http"):
            bad.append("url")
        if not isinstance(self.tldr60, str):
            bad.append("tldr60")
        for name in ("tags", "statutes", "reporter_citations", "judges"):
            if not _is_string_list(getattr(self, name)):
                bad.append(name)

        if bad:
            raise ValidationError(f"Invalid case record {self.url!r}", bad)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert the case to its JSON shape."""
        result = {
            "id": self.id,
            "jurisdiction": self.jurisdiction,
            "court": self.court,
            "date": self.date,
            "parties": self.parties.to_dict(),
            "statutes": list(self.statutes),
            "reporterCitations": list(self.reporter_citations),
            "source": self.source,
            "url": self.url,
            "tldr60": self.tldr60,
            "brief5min": self.brief5min.to_dict(),
            "keyQuotes": [q.to_dict() for q in self.key_quotes],
            "tags": list(self.tags),
        }
        if self.judges:
            result["judges"] = list(self.judges)
        if self.neutral_citation:
            result["neutralCitation"] = self.neutral_citation
        if self.outcome:
            result["outcome"] = self.outcome
        if self.created_at:
            result["createdAt"] = self.created_at
        if self.updated_at:
            result["updatedAt"] = self.updated_at
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaseRecord":
        """Build and validate a case from its JSON shape."""
        if not isinstance(data, dict):
            raise ValidationError("Case record must be an object")

        missing = [
            name
            for name in ("id", "jurisdiction", "court", "date", "parties", "source", "url")
            if name not in data
        ]
        if missing:
            raise ValidationError("Case record is missing fields", missing)

        quotes = []
        for raw_quote in data.get("keyQuotes") or []:
            if not isinstance(raw_quote, dict) or not raw_quote.get("quote"):
                raise ValidationError("Malformed key quote", ["keyQuotes"])
            quotes.append(KeyQuote(quote=raw_quote["quote"], pin=raw_quote.get("pin")))

        record = cls(
            id=str(data["id"]),
            jurisdiction=data["jurisdiction"],
            court=data["court"],
            date=data["date"],
            parties=CaseParties.from_dict(data["parties"]),
            source=data["source"],
            url=data["url"],
            tldr60=data.get("tldr60") or "",
            brief5min=Brief5Min.from_dict(data.get("brief5min")),
            key_quotes=quotes,
            tags=data.get("tags") or [],
            statutes=data.get("statutes") or [],
            reporter_citations=data.get("reporterCitations") or [],
            judges=data.get("judges") or [],
            neutral_citation=data.get("neutralCitation"),
            outcome=data.get("outcome"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )
        return record.validate()

    def __str__(self) -> str:
        parts = [f"Case: {self.parties.title}", f"Court: {self.court}"]
        if self.date:
            parts.append(f"Date: {self.date[:10]}")
        parts.append(f"ID: {self.id}")
        return " | ".join(parts)


@dataclass
class NewsItem:
    """A legal-news article from an RSS feed."""

    id: str
    title: str
    summary: str
    url: str
    source: str
    published_date: str
    category: Optional[str] = None
    author: Optional[str] = None
    image_url: Optional[str] = None

    def validate(self) -> "NewsItem":
        bad = [
            name
            for name in ("id", "title", "url", "source")
            if not isinstance(getattr(self, name), str) or not getattr(self, name)
        ]
        if not isinstance(self.summary, str):
            bad.append("summary")
        if not _is_timestamp(self.published_date):
            bad.append("publishedDate")
        if bad:
            raise ValidationError(f"Invalid news item {self.url!r}", bad)
        return self

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "url": self.url,
            "source": self.source,
            "publishedDate": self.published_date,
        }
        if self.category:
            result["category"] = self.category
        if self.author:
            result["author"] = self.author
        if self.image_url:
            result["imageUrl"] = self.image_url
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewsItem":
        if not isinstance(data, dict):
            raise ValidationError("News item must be an object")
        missing = [
            name
            for name in ("id", "title", "summary", "url", "source", "publishedDate")
            if name not in data
        ]
        if missing:
            raise ValidationError("News item is missing fields", missing)
        return cls(
            id=data["id"],
            title=data["title"],
            summary=data["summary"],
            url=data["url"],
            source=data["source"],
            published_date=data["publishedDate"],
            category=data.get("category"),
            author=data.get("author"),
            image_url=data.get("imageUrl"),
        ).validate()
