"""
Index builder.

Derives the static JSON views the reader UI loads: the day index, the search
index, the trending list and today's snapshot.
"""

import json
from collections import OrderedDict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .store import decode_document
from .utils.data_models import CaseRecord
from .utils.exceptions import ParsingError, ValidationError
from .utils.helpers import day_key, setup_logger, to_iso, utc_now, validate_date

logger = setup_logger("five_min_case.index_builder")

SEARCH_INDEX_VERSION = "1.0"
TRENDING_DAYS = 7
TRENDING_LIMIT = 10


def _cases_from_payloads(payloads: Sequence[Any], origin: str) -> List[CaseRecord]:
    cases = []
    for payload in payloads:
        try:
            cases.append(CaseRecord.from_dict(payload))
        except ValidationError as e:
            logger.warning(f"Skipping invalid case in {origin}: {str(e)}")
    return cases


def load_case_files(cases_dir: Union[str, Path]) -> List[CaseRecord]:
    """
    Load every case from the ``*.json`` files below ``cases_dir``.

    Each file holds a list of case objects. A file that cannot be read or
    parsed is logged and skipped; so are invalid entries.
    """
    cases_dir = Path(cases_dir)
    if not cases_dir.is_dir():
        logger.error(f"Cases directory {cases_dir} does not exist")
        return []

    cases = []
    for path in sorted(cases_dir.rglob("*.json")):
        try:
            payloads = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {path}: {str(e)}")
            continue
        if not isinstance(payloads, list):
            logger.error(f"Failed to load {path}: expected a list of cases")
            continue
        cases.extend(_cases_from_payloads(payloads, str(path)))

    logger.info(f"Loaded {len(cases)} cases from {cases_dir}")
    return cases


def load_cases_from_store(store, collection_id: str) -> List[CaseRecord]:
    """Load every case held in the document store."""
    payloads = []
    for document in store.list_all(collection_id):
        try:
            payloads.append(decode_document(document))
        except ParsingError as e:
            logger.warning(str(e))
    return _cases_from_payloads(payloads, collection_id)


def build_day_index(cases: Sequence[CaseRecord], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Group cases by calendar day, newest day first."""
    by_day = OrderedDict()
    for case in cases:
        by_day.setdefault(day_key(case.date), []).append(case)

    days = [
        {
            "date": day,
            "count": len(day_cases),
            "cases": [
                {"id": c.id, "title": c.parties.title, "court": c.court, "tags": list(c.tags)}
                for c in day_cases
            ],
        }
        for day, day_cases in by_day.items()
    ]
    days.sort(key=lambda entry: entry["date"], reverse=True)

    return {"generated": to_iso(now or utc_now()), "days": days}


def search_text(case: CaseRecord) -> str:
    """Lowercase blob of every searchable field."""
    return " ".join(
        [
            case.parties.title,
            case.court,
            case.tldr60,
            " ".join(case.tags),
            " ".join(case.statutes),
            case.neutral_citation or "",
            " ".join(case.reporter_citations),
        ]
    ).lower()


def build_search_index(cases: Sequence[CaseRecord], now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "version": SEARCH_INDEX_VERSION,
        "lastUpdated": to_iso(now or utc_now()),
        "cases": [
            {
                "id": c.id,
                "searchText": search_text(c),
                "jurisdiction": c.jurisdiction,
                "court": c.court,
                "date": c.date,
                "tags": list(c.tags),
            }
            for c in cases
        ],
    }


def build_trending(
    cases: Sequence[CaseRecord],
    now: Optional[datetime] = None,
    days: int = TRENDING_DAYS,
    limit: int = TRENDING_LIMIT,
) -> Dict[str, Any]:
    """
    The most recent cases of the last ``days`` days.

    Recency stands in for popularity until there are view counts.
    """
    now = validate_date(now or utc_now())
    since = now - timedelta(days=days)

    recent = [c for c in cases if validate_date(c.date) >= since]
    recent.sort(key=lambda c: c.date, reverse=True)

    return {
        "generated": to_iso(now),
        "period": "week",
        "cases": [
            {
                "id": c.id,
                "title": c.parties.title,
                "court": c.court,
                "date": c.date,
                "jurisdiction": c.jurisdiction,
                "tldr60": c.tldr60,
                "tags": list(c.tags),
            }
            for c in recent[:limit]
        ],
    }


def build_today_snapshot(cases: Sequence[CaseRecord], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Every case dated on the current UTC day, in full."""
    now = now or utc_now()
    today = day_key(now)
    todays = [c for c in cases if day_key(c.date) == today]
    return {
        "date": today,
        "generated": to_iso(now),
        "count": len(todays),
        "cases": [c.to_dict() for c in todays],
    }


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def write_indexes(
    cases: Sequence[CaseRecord],
    data_dir: Union[str, Path],
    public_dir: Union[str, Path],
    now: Optional[datetime] = None,
) -> Dict[str, Path]:
    """
    Build and write all four views.

    Returns:
        Mapping of view name to the file written; empty when there are no
        cases
    """
    if not cases:
        logger.warning("No cases found - run the scrapers and summarizer first")
        return {}

    now = now or utc_now()
    data_dir = Path(data_dir)
    public_dir = Path(public_dir)

    day_index = build_day_index(cases, now)
    search_index = build_search_index(cases, now)
    trending = build_trending(cases, now)
    today = build_today_snapshot(cases, now)

    written = {
        "index": _write_json(data_dir / "index.json", day_index),
        "search": _write_json(data_dir / "search-index.json", search_index),
        "trending": _write_json(data_dir / "trending.json", trending),
        "today": _write_json(public_dir / "today.json", today),
    }

    logger.info(f"Built master index with {len(day_index['days'])} days")
    logger.info(f"Built search index with {len(search_index['cases'])} cases")
    logger.info(f"Built trending data with {len(trending['cases'])} cases")
    logger.info(f"Built today's data with {today['count']} cases")
    return written
