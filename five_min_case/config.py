"""
Configuration for the five-min-case jobs.

Settings come from the environment, optionally seeded from ``.env.local``
and ``.env``. The source catalogs list every feed and API query the
scrapers run, in the order they run.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .sources.descriptors import (
    CourtListenerDescriptor,
    IndianKanoonDescriptor,
    RSSFeedDescriptor,
    WebFeedDescriptor,
)
from .store import DocumentStore
from .summarizer import GeminiProvider, PerplexityProvider, SummaryProvider
from .utils.exceptions import ConfigurationError

ENV_FILES = (".env.local", ".env")


# Court judgment feeds
CASE_SOURCES = [
    RSSFeedDescriptor(
        name="Indian Kanoon - Supreme Court",
        url="https://indiankanoon.org/feeds/supremecourt.xml",
        jurisdiction="IN",
        source="indiankanoon",
    ),
    RSSFeedDescriptor(
        name="Indian Kanoon - Delhi High Court",
        url="https://indiankanoon.org/feeds/delhihc.xml",
        jurisdiction="IN",
        source="indiankanoon",
    ),
    RSSFeedDescriptor(
        name="Indian Kanoon - Bombay High Court",
        url="https://indiankanoon.org/feeds/bombayhc.xml",
        jurisdiction="IN",
        source="indiankanoon",
    ),
    WebFeedDescriptor(
        name="UK Judiciary",
        url="https://www.judiciary.uk/feed/",
        jurisdiction="UK",
        source="judiciary-uk",
    ),
]

# Federal appellate courts queried on CourtListener
COURTLISTENER_COURTS = [
    "scotus",
    "ca1", "ca2", "ca3", "ca4", "ca5", "ca6",
    "ca7", "ca8", "ca9", "ca10", "ca11", "cadc",
]

COURTLISTENER_SOURCES = [
    CourtListenerDescriptor(name="CourtListener - Federal Appellate", courts=COURTLISTENER_COURTS),
]

# Indian Kanoon API queries: the Supreme Court plus a couple from each high court
KANOON_SOURCES = [
    IndianKanoonDescriptor(name="Supreme Court of India", doctypes="supremecourt", limit=10),
    IndianKanoonDescriptor(name="Delhi High Court", doctypes="delhi", limit=2),
    IndianKanoonDescriptor(name="Bombay High Court", doctypes="bombay", limit=2),
    IndianKanoonDescriptor(name="Madras High Court", doctypes="chennai", limit=2),
    IndianKanoonDescriptor(name="Calcutta High Court", doctypes="kolkata", limit=2),
    IndianKanoonDescriptor(name="Karnataka High Court", doctypes="karnataka", limit=2),
]

NEWS_SOURCES = [
    RSSFeedDescriptor(
        name="Bar & Bench",
        url="https://www.barandbench.com/feed",
        record_type="news",
        category="General",
    ),
    RSSFeedDescriptor(
        name="LiveLaw",
        url="https://www.livelaw.in/rss.xml",
        record_type="news",
        category="General",
    ),
    RSSFeedDescriptor(
        name="LiveLaw - Supreme Court",
        url="https://www.livelaw.in/supreme-court/rss.xml",
        record_type="news",
        category="Supreme Court",
    ),
    RSSFeedDescriptor(
        name="LiveLaw - High Court",
        url="https://www.livelaw.in/high-court/rss.xml",
        record_type="news",
        category="High Courts",
    ),
    RSSFeedDescriptor(
        name="Legally India",
        url="https://www.legallyindia.com/rss.xml",
        record_type="news",
        category="General",
    ),
    RSSFeedDescriptor(
        name="SCC Blog",
        url="https://www.scconline.com/blog/feed/",
        record_type="news",
        category="Analysis",
    ),
    RSSFeedDescriptor(
        name="Indian Constitutional Law",
        url="https://indconlawphil.wordpress.com/feed/",
        record_type="news",
        category="Constitutional",
    ),
    RSSFeedDescriptor(
        name="Law and Other Things",
        url="https://lawandotherthings.com/feed/",
        record_type="news",
        category="Academic",
    ),
]

NEWS_DAILY_LIMIT = 50


def load_env(*paths: str) -> None:
    """
    Seed ``os.environ`` from dotenv files.

    Earlier files win over later ones and real environment variables win
    over both.
    """
    for path in paths or ENV_FILES:
        load_dotenv(path, override=False)


def _first(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


def _number(environ: Mapping[str, str], name: str, default, cast):
    value = environ.get(name)
    if value in (None, ""):
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


@dataclass
class Settings:
    appwrite_endpoint: Optional[str] = None
    appwrite_project_id: Optional[str] = None
    appwrite_api_key: Optional[str] = None
    appwrite_db_id: Optional[str] = None
    cases_collection_id: Optional[str] = None
    news_collection_id: Optional[str] = None
    server_role: str = "team:server"
    indiankanoon_api_key: Optional[str] = None
    courtlistener_api_token: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    perplexity_api_key: Optional[str] = None
    cleanup_days: int = 7
    data_dir: str = "data"
    public_dir: str = "public/data"
    store_request_delay: float = 0.1
    source_delay: float = 1.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Read settings from ``environ`` (``os.environ`` by default).

        Store variables fall back to their ``NEXT_PUBLIC_`` names shared with
        the web client.

        Raises:
            ConfigurationError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        return cls(
            appwrite_endpoint=_first(env, "APPWRITE_ENDPOINT", "NEXT_PUBLIC_APPWRITE_ENDPOINT"),
            appwrite_project_id=_first(
                env, "APPWRITE_PROJECT_ID", "NEXT_PUBLIC_APPWRITE_PROJECT_ID"
            ),
            appwrite_api_key=_first(env, "APPWRITE_API_KEY"),
            appwrite_db_id=_first(env, "APPWRITE_DB_ID", "NEXT_PUBLIC_APPWRITE_DB_ID"),
            cases_collection_id=_first(
                env, "APPWRITE_CASES_COL_ID", "NEXT_PUBLIC_APPWRITE_CASES_COL_ID"
            ),
            news_collection_id=_first(
                env, "APPWRITE_NEWS_COL_ID", "NEXT_PUBLIC_APPWRITE_NEWS_COL_ID"
            ),
            server_role=_first(env, "APPWRITE_SERVER_ROLE") or "team:server",
            indiankanoon_api_key=_first(env, "INDIANKANOON_API_KEY"),
            courtlistener_api_token=_first(env, "COURTLISTENER_API_TOKEN"),
            gemini_api_key=_first(env, "GEMINI_API_KEY"),
            gemini_model=_first(env, "GEMINI_MODEL") or "gemini-1.5-flash",
            perplexity_api_key=_first(env, "PERPLEXITY_API_KEY"),
            cleanup_days=_number(env, "CLEANUP_DAYS", 7, int),
            data_dir=_first(env, "DATA_DIR") or "data",
            public_dir=_first(env, "PUBLIC_DIR") or "public/data",
            store_request_delay=_number(env, "STORE_REQUEST_DELAY", 0.1, float),
            source_delay=_number(env, "SOURCE_DELAY", 1.0, float),
        )

    @property
    def store_configured(self) -> bool:
        return all(
            [
                self.appwrite_endpoint,
                self.appwrite_project_id,
                self.appwrite_api_key,
                self.appwrite_db_id,
            ]
        )

    def require(self, **values: Optional[str]) -> None:
        """
        Raises:
            ConfigurationError: Naming every environment variable left unset
        """
        missing = [name.upper() for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    def require_store(self, collection: str) -> str:
        """
        Check the store credentials plus one collection id.

        Args:
            collection: ``"cases"`` or ``"news"``

        Returns:
            The collection id
        """
        if collection == "cases":
            collection_id = self.cases_collection_id
            variable = "appwrite_cases_col_id"
        else:
            collection_id = self.news_collection_id
            variable = "appwrite_news_col_id"
        self.require(
            appwrite_endpoint=self.appwrite_endpoint,
            appwrite_project_id=self.appwrite_project_id,
            appwrite_api_key=self.appwrite_api_key,
            appwrite_db_id=self.appwrite_db_id,
            **{variable: collection_id},
        )
        return collection_id


def build_store(settings: Settings) -> Optional[DocumentStore]:
    """DocumentStore for the configured database, or None when unconfigured."""
    if not settings.store_configured:
        return None
    return DocumentStore(
        endpoint=settings.appwrite_endpoint,
        project_id=settings.appwrite_project_id,
        api_key=settings.appwrite_api_key,
        database_id=settings.appwrite_db_id,
        server_role=settings.server_role,
        request_delay=settings.store_request_delay,
    )


def build_summary_provider(settings: Settings) -> Optional[SummaryProvider]:
    """Gemini if keyed, else Perplexity if keyed, else None for the template."""
    if settings.gemini_api_key:
        return GeminiProvider(settings.gemini_api_key, model=settings.gemini_model)
    if settings.perplexity_api_key:
        return PerplexityProvider(settings.perplexity_api_key)
    return None
