"""
Record normalizer.

Maps raw items from every source kind onto ``CaseRecord`` or ``NewsItem``.
Party, court and date extraction are shared by all case sources.
"""

import re
import random
import hashlib
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Any, Union

from .utils.data_models import CaseParties, CaseRecord, NewsItem
from .utils.exceptions import ValidationError
from .utils.helpers import (
    sanitize_text,
    setup_logger,
    strip_html,
    to_iso,
    utc_now,
    validate_date,
    extract_case_id_from_url,
)

logger = setup_logger("five_min_case.normalize")

# Tried in order; the first match wins
PARTY_PATTERNS = [
    re.compile(r"^(.+?)\s+v\.\s+(.+)$", re.IGNORECASE),
    re.compile(r"^(.+?)\s+vs\.?\s+(.+)$", re.IGNORECASE),
    re.compile(r"^(.+?)\s+versus\s+(.+)$", re.IGNORECASE),
]

# URL fragment -> canonical court name for the Indian Kanoon court feeds
KANOON_FEED_COURTS = [
    ("supremecourt", "Supreme Court of India"),
    ("delhihc", "Delhi High Court"),
    ("bombayhc", "Bombay High Court"),
]

DMY_PATTERN = re.compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4})\b")
YEAR_PATTERN = re.compile(r"\b(19\d{2}|20\d{2})\b")
NEUTRAL_CITATION_PATTERN = re.compile(r"\[(\d{4})\]\s+(\d+\s+)?(\w+)\s+(\d+)")
REPORTER_CITATION_PATTERNS = [
    re.compile(r"\((\d{4})\)\s+(\d+)\s+(SCC|SCR)\s+(\d+)"),
    re.compile(r"\b(\d{4})\s+(\d+)\s+(SCC|SCR)\s+(\d+)"),
]
KANOON_DOC_ID_PATTERN = r"/doc/(\d+)/"

SUMMARY_MAX_LENGTH = 300


def extract_parties(title: str) -> CaseParties:
    """
    Split an ``A v. B`` style case title into appellant and respondent.

    ``v.``, ``vs`` and ``versus`` are tried in that order, case-insensitively.
    When nothing matches, the trimmed title is kept with no party breakdown.
    """
    title = (title or "").strip()
    for pattern in PARTY_PATTERNS:
        match = pattern.match(title)
        if match:
            return CaseParties(
                title=title,
                appellant=match.group(1).strip(),
                respondent=match.group(2).strip(),
            )
    return CaseParties(title=title)


def extract_court(source: str, raw: Dict[str, Any]) -> str:
    """
    Work out the court name for a raw item.

    Args:
        source: Source tag the item came from
        raw: Raw item

    Returns:
        Canonical court name, or a generic label for unknown sources
    """
    if source == "indiankanoon":
        docsource = raw.get("docsource")
        if docsource:
            # "Delhi High Court 2024" -> "Delhi High Court"
            return re.sub(r"\s*\d{4}\s*$", "", str(docsource)).strip() or "High Court"
        haystack = " ".join(str(raw.get(key) or "") for key in ("link", "feedUrl"))
        for fragment, court in KANOON_FEED_COURTS:
            if fragment in haystack:
                return court
        return "High Court"
    if source == "courtlistener":
        return raw.get("court") or raw.get("court_name") or "Federal Court"
    if source == "judiciary-uk":
        return "UK Courts"
    return "Court"


def _start_of_day(value: datetime) -> datetime:
    return validate_date(value).replace(hour=0, minute=0, second=0, microsecond=0)


def _parse_dmy(text: str) -> Optional[datetime]:
    match = DMY_PATTERN.search(text)
    if not match:
        return None
    day, month, year = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def extract_date(
    published: Optional[str] = None,
    metadata: Optional[str] = None,
    title: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Pick a record date using a fixed fallback order.

    1. The explicit publish-date field (``DD-MM-YYYY`` read day-first,
       anything else parsed by dateutil)
    2. A ``DD-MM-YYYY`` date found in the metadata text
    3. A four-digit year in the title, as January 1 of that year
    4. ``now``

    Returns:
        ISO-8601 UTC timestamp string
    """
    if published:
        published = str(published).strip()
        parsed = _parse_dmy(published)
        if parsed is None:
            try:
                parsed = validate_date(published, default=_start_of_day(now or utc_now()))
            except ValueError:
                logger.debug(f"Unparseable publish date {published!r}")
        if parsed is not None:
            return to_iso(parsed)

    if metadata:
        parsed = _parse_dmy(metadata)
        if parsed is not None:
            return to_iso(parsed)

    if title:
        match = YEAR_PATTERN.search(title)
        if match:
            return to_iso(datetime(int(match.group(1)), 1, 1, tzinfo=timezone.utc))

    return to_iso(now or utc_now())


def clean_summary(content: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Strip HTML, collapse whitespace and cap the length with an ellipsis."""
    clean = re.sub(r"\s+", " ", strip_html(content or "")).strip()
    if len(clean) > max_length:
        clean = clean[: max_length - 3] + "..."
    return clean


def generate_news_id(url: str) -> str:
    """Stable 12-character id derived from the article URL."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]


def generate_case_id(date: str, court: str, rng: random.Random = None) -> str:
    """Synthesize ``YYYY-MM-<COURT>-<suffix>`` for cases without a source id."""
    rng = rng or random
    abbr = re.sub(r"[^A-Za-z0-9]", "", court or "")[:3].upper() or "UNK"
    suffix = "".join(rng.choice("abcdefghijklmnopqrstuvwxyz0123456789") for _ in range(4))
    return f"{date[:4]}-{date[5:7]}-{abbr}-{suffix}"


def _require(raw: Dict[str, Any], *names: str):
    if not isinstance(raw, dict):
        raise ValidationError("Raw item is not an object")
    bad = [
        name for name in names
        if not isinstance(raw.get(name), str) or not raw.get(name).strip()
    ]
    if bad:
        raise ValidationError("Raw item is missing required fields", bad)


def _reporter_citations(*texts: Optional[str]) -> List[str]:
    citations = []
    for text in texts:
        if not text:
            continue
        for pattern in REPORTER_CITATION_PATTERNS:
            for year, volume, reporter, page in pattern.findall(text):
                citation = f"({year}) {volume} {reporter} {page}"
                if citation not in citations:
                    citations.append(citation)
    return citations


def normalize_rss_case(
    raw: Dict[str, Any], descriptor, now: datetime = None, rng: random.Random = None
) -> CaseRecord:
    """Build a case from a court RSS item."""
    _require(raw, "title", "link")
    title = sanitize_text(strip_html(raw["title"]))
    date = extract_date(raw.get("pubDate"), raw.get("contentSnippet"), title, now)
    court = extract_court(descriptor.source, raw)
    url = raw["link"].strip()

    case_id = extract_case_id_from_url(url, KANOON_DOC_ID_PATTERN)
    if not case_id:
        case_id = generate_case_id(date, court, rng)

    return CaseRecord(
        id=case_id,
        jurisdiction=descriptor.jurisdiction,
        court=court,
        date=date,
        parties=extract_parties(title),
        source=descriptor.source,
        url=url,
    ).validate()


def normalize_kanoon_case(
    doc: Dict[str, Any], descriptor, now: datetime = None, rng: random.Random = None
) -> CaseRecord:
    """Build a case from an Indian Kanoon document payload."""
    if not isinstance(doc, dict) or doc.get("tid") in (None, ""):
        raise ValidationError("Document has no tid", ["tid"])
    _require(doc, "title")

    tid = str(doc["tid"])
    title = sanitize_text(strip_html(doc["title"]))
    headline = sanitize_text(strip_html(doc.get("headline") or ""))

    neutral = NEUTRAL_CITATION_PATTERN.search(title)
    bench = doc.get("bench") or ""

    return CaseRecord(
        id=tid,
        jurisdiction=descriptor.jurisdiction,
        court=extract_court("indiankanoon", doc),
        date=extract_date(doc.get("publishdate"), headline, title, now),
        parties=extract_parties(title),
        source=descriptor.source,
        url=f"https://indiankanoon.org/doc/{tid}/",
        neutral_citation=neutral.group(0) if neutral else None,
        reporter_citations=_reporter_citations(title, headline),
        judges=[j.strip() for j in str(bench).split(",") if j.strip()],
    ).validate()


def normalize_courtlistener_case(
    item: Dict[str, Any], descriptor, now: datetime = None, rng: random.Random = None
) -> CaseRecord:
    """Build a case from a CourtListener search result."""
    if not isinstance(item, dict):
        raise ValidationError("Search result is not an object")
    title = sanitize_text(item.get("caseName") or item.get("caseNameFull") or "")
    if not title:
        raise ValidationError("Search result has no case name", ["caseName"])

    absolute_url = item.get("absolute_url") or ""
    if absolute_url and not absolute_url.startswith("http"):
        absolute_url = f"https://www.courtlistener.com{absolute_url}"

    date = extract_date(item.get("dateFiled"), None, title, now)
    court = extract_court("courtlistener", item)
    cluster_id = item.get("cluster_id") or item.get("id")
    citations = item.get("citation") or []
    if isinstance(citations, str):
        citations = [citations]

    return CaseRecord(
        id=f"cl-{cluster_id}" if cluster_id else generate_case_id(date, court, rng),
        jurisdiction=descriptor.jurisdiction,
        court=court,
        date=date,
        parties=extract_parties(title),
        source=descriptor.source,
        url=absolute_url,
        reporter_citations=[str(c) for c in citations],
        judges=[j.strip() for j in str(item.get("judge") or "").split(",") if j.strip()],
    ).validate()


def normalize_news_item(raw: Dict[str, Any], descriptor, now: datetime = None) -> NewsItem:
    """Build a news item from a news-feed RSS item."""
    _require(raw, "title", "link")
    title = raw["title"].strip()
    url = raw["link"].strip()

    return NewsItem(
        id=generate_news_id(url),
        title=title,
        summary=clean_summary(raw.get("contentSnippet") or raw.get("content") or title),
        url=url,
        source=descriptor.name,
        published_date=extract_date(raw.get("pubDate"), now=now),
        category=descriptor.category,
        author=raw.get("creator") or raw.get("author"),
        image_url=raw.get("enclosureUrl"),
    ).validate()


def _normalizer_for(descriptor) -> Callable:
    if descriptor.kind in ("rss", "web"):
        if descriptor.record_type == "news":
            return lambda raw, now, rng: normalize_news_item(raw, descriptor, now)
        return lambda raw, now, rng: normalize_rss_case(raw, descriptor, now, rng)
    if descriptor.kind == "indiankanoon":
        return lambda raw, now, rng: normalize_kanoon_case(raw, descriptor, now, rng)
    if descriptor.kind == "courtlistener":
        return lambda raw, now, rng: normalize_courtlistener_case(raw, descriptor, now, rng)
    raise ValueError(f"No normalizer for {descriptor.kind!r} sources")


def normalize_items(
    raw_items: List[Dict[str, Any]],
    descriptor,
    now: datetime = None,
    rng: random.Random = None,
) -> List[Union[CaseRecord, NewsItem]]:
    """
    Normalize one source's raw items, skipping anything malformed.

    Args:
        raw_items: Items as returned by the source's fetcher
        descriptor: The source descriptor they came from
        now: Fetch time, used when an item carries no usable date
        rng: Random source for synthesized case ids

    Returns:
        Valid records in source order
    """
    now = now or utc_now()
    normalize = _normalizer_for(descriptor)

    records = []
    for index, raw in enumerate(raw_items):
        try:
            records.append(normalize(raw, now, rng))
        except ValidationError as e:
            logger.warning(f"Skipping item {index} from {descriptor.name}: {str(e)}")
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(
                f"Skipping malformed item {index} from {descriptor.name}: {str(e)}"
            )
    return records
