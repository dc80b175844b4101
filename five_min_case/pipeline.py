"""
Pipeline orchestration.

Each scrape is the same chain of stages: fetch every source in order,
normalize, drop duplicates, stage the survivors on disk and, when a
document store is configured, persist them.
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .config import KANOON_SOURCES, NEWS_DAILY_LIMIT
from .dedup import deduplicate, dedupe_news
from .normalize import normalize_items
from .sources import IndianKanoonFetcher, fetch_source
from .store import DocumentStore, PersistResult, PublishResult, persist_records, publish_records
from .summarizer import raw_file_for
from .utils.data_models import CaseRecord, NewsItem
from .utils.exceptions import ConfigurationError, ParsingError, StoreError, ValidationError
from .utils.helpers import day_key, setup_logger, utc_now

logger = setup_logger("five_min_case.pipeline")

Fetched = List[Tuple[Any, List[Dict[str, Any]]]]


@dataclass
class RunSummary:
    sources: int = 0
    fetched: int = 0
    normalized: int = 0
    unique: int = 0
    staged: int = 0
    output: Optional[Path] = None
    persisted: Optional[PersistResult] = None


def fetch_all(
    descriptors: Sequence[Any],
    fetchers: Dict[str, Any],
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Fetched:
    """
    Fetch every source in order, sleeping ``delay`` seconds between sources.

    Returns:
        ``(descriptor, raw_items)`` pairs; a failed source has no items
    """
    fetched = []
    for index, descriptor in enumerate(descriptors):
        if index and delay > 0:
            sleep(delay)
        logger.info(f"Fetching from {descriptor.name}...")
        fetched.append((descriptor, fetch_source(descriptor, fetchers)))
    return fetched


def normalize_all(fetched: Fetched, now: Optional[datetime] = None, rng=None) -> List[Union[CaseRecord, NewsItem]]:
    now = now or utc_now()
    records = []
    for descriptor, raw_items in fetched:
        records.extend(normalize_items(raw_items, descriptor, now=now, rng=rng))
    return records


def _read_list(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ParsingError(f"{path} is not valid JSON: {str(e)}") from e
    if not isinstance(payload, list):
        raise ParsingError(f"{path} does not hold a list")
    return payload


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def save_raw_cases(
    records: Sequence[CaseRecord], raw_dir: Union[str, Path], now: Optional[datetime] = None
) -> Tuple[Path, int]:
    """
    Merge cases into the day's ``raw/YYYY-MM-DD-raw.json`` by URL.

    Returns:
        The raw file and the number of cases newly added to it
    """
    path = raw_file_for(raw_dir, now or utc_now())
    existing = _read_list(path)
    known = {entry.get("url") for entry in existing if isinstance(entry, dict)}

    added = 0
    for record in records:
        if record.url in known:
            continue
        existing.append(record.to_dict())
        known.add(record.url)
        added += 1

    _write_json(path, existing)
    logger.info(f"Saved {added} new cases to {path} ({len(existing)} total)")
    return path, added


def save_news(
    items: Sequence[NewsItem],
    news_dir: Union[str, Path],
    public_dir: Union[str, Path],
    now: Optional[datetime] = None,
    limit: int = NEWS_DAILY_LIMIT,
) -> Path:
    """
    Write the day's top ``limit`` items to ``news/YYYY/MM/DD.json`` and the
    public ``today-news.json``.
    """
    today = day_key(now or utc_now())
    top = list(items)[:limit]
    payload = {"date": today, "count": len(top), "news": [item.to_dict() for item in top]}

    path = _write_json(Path(news_dir) / today[:4] / today[5:7] / f"{today[8:10]}.json", payload)
    _write_json(Path(public_dir) / "today-news.json", payload)
    logger.info(f"Saved {len(top)} news items to {path}")
    return path


def _existing_urls(store: Optional[DocumentStore], collection_id: Optional[str]):
    if store is None or not collection_id:
        return None
    try:
        return store.existing_urls(collection_id)
    except StoreError as e:
        logger.error(f"Could not read stored URLs, skipping the store this run: {str(e)}")
        return None


def run_case_scrape(
    descriptors: Sequence[Any],
    fetchers: Dict[str, Any],
    data_dir: Union[str, Path],
    store: Optional[DocumentStore] = None,
    collection_id: Optional[str] = None,
    now: Optional[datetime] = None,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> RunSummary:
    """
    Scrape case sources into the day's raw file and, optionally, the store.

    When the store's existing URLs cannot be read the run still stages
    cases locally but writes nothing to the store.
    """
    now = now or utc_now()
    summary = RunSummary(sources=len(descriptors))

    fetched = fetch_all(descriptors, fetchers, delay=delay, sleep=sleep)
    summary.fetched = sum(len(items) for _, items in fetched)

    records = normalize_all(fetched, now)
    summary.normalized = len(records)

    existing = _existing_urls(store, collection_id)
    unique = deduplicate(records, existing or ())
    summary.unique = len(unique)

    summary.output, summary.staged = save_raw_cases(unique, Path(data_dir) / "raw", now)
    if existing is not None:
        summary.persisted = persist_records(store, collection_id, unique)

    logger.info(
        f"Case scrape finished: {summary.fetched} fetched, {summary.unique} unique, "
        f"{summary.staged} new in {summary.output}"
    )
    return summary


def run_kanoon_scrape(
    api_key: Optional[str],
    data_dir: Union[str, Path],
    store: Optional[DocumentStore] = None,
    collection_id: Optional[str] = None,
    descriptors: Sequence[Any] = KANOON_SOURCES,
    now: Optional[datetime] = None,
    delay: float = 1.0,
    fetcher: Optional[IndianKanoonFetcher] = None,
) -> RunSummary:
    """
    Scrape recent judgments through the Indian Kanoon API.

    Raises:
        ConfigurationError: If no API key is configured
    """
    if fetcher is None:
        if not api_key:
            raise ConfigurationError(
                "INDIANKANOON_API_KEY is not set. Get an API key from https://api.indiankanoon.org/"
            )
        fetcher = IndianKanoonFetcher(api_key)

    with fetcher:
        return run_case_scrape(
            descriptors,
            {"indiankanoon": fetcher},
            data_dir,
            store=store,
            collection_id=collection_id,
            now=now,
            delay=delay,
        )


def run_news_scrape(
    descriptors: Sequence[Any],
    fetchers: Dict[str, Any],
    data_dir: Union[str, Path],
    public_dir: Union[str, Path],
    store: Optional[DocumentStore] = None,
    collection_id: Optional[str] = None,
    now: Optional[datetime] = None,
    delay: float = 1.0,
    limit: int = NEWS_DAILY_LIMIT,
    sleep: Callable[[float], None] = time.sleep,
) -> RunSummary:
    """
    Scrape news feeds, keep the newest ``limit`` unique items and stage them.
    """
    now = now or utc_now()
    summary = RunSummary(sources=len(descriptors))

    fetched = fetch_all(descriptors, fetchers, delay=delay, sleep=sleep)
    summary.fetched = sum(len(items) for _, items in fetched)

    items = normalize_all(fetched, now)
    summary.normalized = len(items)

    existing = _existing_urls(store, collection_id)
    unique = dedupe_news(items, existing or ())[:limit]
    summary.unique = len(unique)

    summary.output = save_news(unique, Path(data_dir) / "news", public_dir, now, limit=limit)
    summary.staged = len(unique)
    if existing is not None:
        summary.persisted = persist_records(store, collection_id, unique)

    logger.info(f"News scrape finished: {summary.fetched} fetched, {summary.unique} kept")
    return summary


def publish_case_file(
    cases_file: Union[str, Path], store: DocumentStore, collection_id: str
) -> Optional[PublishResult]:
    """
    Push a day's summarized cases to the store, replacing the unsummarized
    payloads written at scrape time.

    Returns:
        None when the file does not exist
    """
    path = Path(cases_file)
    if not path.exists():
        logger.warning(f"No summarized cases found at {path}")
        return None

    cases = []
    for payload in _read_list(path):
        try:
            cases.append(CaseRecord.from_dict(payload))
        except ValidationError as e:
            logger.warning(f"Skipping invalid case in {path}: {str(e)}")
    return publish_records(store, collection_id, cases)
