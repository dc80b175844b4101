"""
Deduplication of normalized records.

URL is the cross-run key; the normalized title only collapses duplicates
within a single batch. In both cases the first record seen wins.
"""

import re
from typing import Iterable, List, Sequence, TypeVar, Union

from .utils.data_models import CaseRecord, NewsItem
from .utils.helpers import setup_logger

logger = setup_logger("five_min_case.dedup")

Record = TypeVar("Record", CaseRecord, NewsItem)


def normalize_title(title: str) -> str:
    """Lowercase and drop everything that is not a letter or digit."""
    return re.sub(r"[^a-z0-9]", "", (title or "").lower())


def record_title(record: Union[CaseRecord, NewsItem]) -> str:
    if isinstance(record, CaseRecord):
        return record.parties.title
    return record.title


def filter_existing_urls(records: Sequence[Record], existing_urls: Iterable[str] = ()) -> List[Record]:
    """
    Drop records whose URL is already stored or already seen in the batch.
    """
    seen = set(existing_urls)
    kept = []
    for record in records:
        if record.url in seen:
            logger.debug(f"Dropping duplicate URL {record.url}")
            continue
        seen.add(record.url)
        kept.append(record)
    return kept


def dedupe_by_title(records: Sequence[Record]) -> List[Record]:
    """Keep the first record for each normalized title, preserving order."""
    seen = set()
    kept = []
    for record in records:
        key = normalize_title(record_title(record))
        if key in seen:
            logger.debug(f"Dropping duplicate title {record_title(record)!r}")
            continue
        seen.add(key)
        kept.append(record)
    return kept


def sort_news_by_date(items: Sequence[NewsItem]) -> List[NewsItem]:
    """Newest first; items published at the same instant keep their order."""
    return sorted(items, key=lambda item: item.published_date, reverse=True)


def deduplicate(records: Sequence[Record], existing_urls: Iterable[str] = ()) -> List[Record]:
    """
    Remove already-stored URLs, then collapse same-title records.

    Args:
        records: Normalized batch in source order
        existing_urls: URLs already persisted

    Returns:
        The surviving records, still in source order
    """
    fresh = filter_existing_urls(records, existing_urls)
    unique = dedupe_by_title(fresh)
    logger.info(
        f"Deduplicated {len(records)} records: {len(records) - len(fresh)} known URLs, "
        f"{len(fresh) - len(unique)} repeated titles, {len(unique)} kept"
    )
    return unique


def dedupe_news(items: Sequence[NewsItem], existing_urls: Iterable[str] = ()) -> List[NewsItem]:
    """Sort news newest-first so the latest copy of a story survives, then dedupe."""
    return deduplicate(sort_news_by_date(items), existing_urls)
