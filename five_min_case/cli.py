"""
Command-line interface for the five-min-case pipeline.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    CASE_SOURCES,
    COURTLISTENER_SOURCES,
    KANOON_SOURCES,
    NEWS_SOURCES,
    Settings,
    build_store,
    build_summary_provider,
    load_env,
)
from .index_builder import load_case_files, load_cases_from_store, write_indexes
from .pipeline import publish_case_file, run_case_scrape, run_kanoon_scrape, run_news_scrape
from .sources import CourtListenerFetcher, RSSFeedFetcher
from .summarizer import CaseSummarizer, cases_file_for, raw_file_for, summarize_raw_file
from .utils.exceptions import ConfigurationError
from .utils.helpers import setup_logger, utc_now, validate_date

COLLECTIONS = ("cases", "news")


def _settings(args) -> Settings:
    settings = args.settings
    if args.data_dir:
        settings.data_dir = args.data_dir
    return settings


def _optional_store(settings: Settings, collection: str):
    collection_id = settings.cases_collection_id if collection == "cases" else settings.news_collection_id
    if not collection_id:
        return None, None
    return build_store(settings), collection_id


def _close(*resources) -> None:
    for resource in resources:
        if resource is not None:
            resource.close()


def _print_run(label: str, summary) -> None:
    print(f"{label}: {summary.fetched} fetched from {summary.sources} sources, "
          f"{summary.unique} unique, {summary.staged} staged in {summary.output}")
    if summary.persisted:
        print(f"Stored {summary.persisted.created} new, "
              f"{summary.persisted.duplicates} already present, "
              f"{summary.persisted.failed} failed")


def _print_publish(result) -> None:
    print(f"Published {result.updated} updated, {result.created} created, "
          f"{result.failed} failed")


def scrape_cases_command(args) -> None:
    """Execute scrape-cases command."""
    logger = setup_logger("cli", level=args.verbose)
    settings = _settings(args)
    store, collection_id = _optional_store(settings, "cases")

    rss = RSSFeedFetcher()
    courtlistener = CourtListenerFetcher(settings.courtlistener_api_token)
    fetchers = {"rss": rss, "web": rss, "courtlistener": courtlistener}
    try:
        logger.info("Starting case scraper...")
        summary = run_case_scrape(
            CASE_SOURCES + COURTLISTENER_SOURCES,
            fetchers,
            settings.data_dir,
            store=store,
            collection_id=collection_id,
            delay=settings.source_delay,
        )
        _print_run("Cases", summary)
    finally:
        _close(rss, courtlistener, store)


def scrape_kanoon_command(args) -> None:
    """Execute scrape-kanoon command."""
    settings = _settings(args)
    store, collection_id = _optional_store(settings, "cases")
    try:
        summary = run_kanoon_scrape(
            settings.indiankanoon_api_key,
            settings.data_dir,
            store=store,
            collection_id=collection_id,
            delay=settings.source_delay,
        )
    finally:
        _close(store)
    _print_run("Indian Kanoon", summary)


def scrape_news_command(args) -> None:
    """Execute scrape-news command."""
    settings = _settings(args)
    store, collection_id = _optional_store(settings, "news")

    try:
        with RSSFeedFetcher() as rss:
            summary = run_news_scrape(
                NEWS_SOURCES,
                {"rss": rss},
                settings.data_dir,
                settings.public_dir,
                store=store,
                collection_id=collection_id,
                delay=settings.source_delay,
            )
    finally:
        _close(store)
    _print_run("News", summary)


def summarize_command(args) -> None:
    """Execute summarize command."""
    logger = setup_logger("cli", level=args.verbose)
    settings = _settings(args)
    day = validate_date(args.date) if args.date else utc_now()

    provider = build_summary_provider(settings)
    if provider is None:
        logger.warning("No LLM API key configured, using template summaries")

    try:
        output = summarize_raw_file(
            raw_file_for(Path(settings.data_dir) / "raw", day),
            Path(settings.data_dir) / "cases",
            CaseSummarizer(provider),
            now=day,
        )
    finally:
        _close(provider)
    if output is None:
        print("No raw cases to summarize.")
        return
    print(f"Wrote summaries to {output}")

    store, collection_id = _optional_store(settings, "cases")
    if store is None:
        logger.info("Document store not configured, summaries kept on disk only")
        return
    with store:
        _print_publish(publish_case_file(output, store, collection_id))


def publish_cases_command(args) -> None:
    """Execute publish-cases command."""
    settings = _settings(args)
    collection_id = settings.require_store("cases")
    day = validate_date(args.date) if args.date else utc_now()

    with build_store(settings) as store:
        result = publish_case_file(
            cases_file_for(Path(settings.data_dir) / "cases", day), store, collection_id
        )
    if result is None:
        print("No summarized cases to publish.")
    else:
        _print_publish(result)


def build_index_command(args) -> None:
    """Execute build-index command."""
    settings = _settings(args)
    if args.from_store:
        collection_id = settings.require_store("cases")
        with build_store(settings) as store:
            cases = load_cases_from_store(store, collection_id)
    else:
        cases = load_case_files(Path(settings.data_dir) / "cases")

    written = write_indexes(cases, settings.data_dir, settings.public_dir)
    if not written:
        print("No cases found. Run the scrapers and summarizer first.")
        return
    for name, path in written.items():
        print(f"{name:10} {path}")


def _clean(args, collection: str, date_field: str) -> None:
    settings = _settings(args)
    collection_id = settings.require_store(collection)
    days = args.days if args.days is not None else settings.cleanup_days

    with build_store(settings) as store:
        result = store.prune_older_than(collection_id, days, date_field)
    print(f"Scanned {result.scanned}, deleted {result.deleted} of {result.expired} "
          f"expired ({result.failed} failed, {result.skipped} skipped)")


def clean_news_command(args) -> None:
    """Execute clean-news command."""
    _clean(args, "news", "publishedDate")


def clean_cases_command(args) -> None:
    """Execute clean-cases command."""
    _clean(args, "cases", "date")


def backfill_perms_command(args) -> None:
    """Execute backfill-perms command."""
    settings = _settings(args)
    collections = COLLECTIONS if args.collection == "all" else (args.collection,)
    collection_ids = [settings.require_store(collection) for collection in collections]
    with build_store(settings) as store:
        for collection, collection_id in zip(collections, collection_ids):
            result = store.backfill_permissions(collection_id)
            print(f"{collection}: processed {result.processed}, updated {result.updated}, "
                  f"failed {result.failed}")


def list_sources_command(args) -> None:
    """List configured sources."""
    groups = [
        ("Case feeds", CASE_SOURCES),
        ("CourtListener", COURTLISTENER_SOURCES),
        ("Indian Kanoon API", KANOON_SOURCES),
        ("News feeds", NEWS_SOURCES),
    ]
    for title, descriptors in groups:
        print(title)
        print("=" * 50)
        for descriptor in descriptors:
            detail = getattr(descriptor, "url", None) or getattr(descriptor, "doctypes", None) \
                or " ".join(getattr(descriptor, "courts", []))
            print(f"{descriptor.name:35} [{descriptor.kind}] {detail}")
        print()


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="five-min-case",
        description="5 Min Case - legal judgments and news ETL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  five-min-case scrape-cases
  five-min-case summarize --date 2025-09-01
  five-min-case publish-cases --date 2025-09-01
  five-min-case build-index --from-store
  five-min-case clean-news --days 7
        """,
    )

    parser.add_argument("--version", action="version", version=f"5 Min Case {__version__}")
    parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase verbosity"
    )
    parser.add_argument("--data-dir", help="Root of the data files", type=str)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    cases_parser = subparsers.add_parser("scrape-cases", help="Scrape court judgment feeds")
    cases_parser.set_defaults(func=scrape_cases_command)

    kanoon_parser = subparsers.add_parser(
        "scrape-kanoon", help="Scrape recent judgments from the Indian Kanoon API"
    )
    kanoon_parser.set_defaults(func=scrape_kanoon_command)

    news_parser = subparsers.add_parser("scrape-news", help="Scrape legal news feeds")
    news_parser.set_defaults(func=scrape_news_command)

    summarize_parser = subparsers.add_parser("summarize", help="Summarize the day's raw cases")
    summarize_parser.add_argument("--date", help="Day to summarize (YYYY-MM-DD)", type=str)
    summarize_parser.set_defaults(func=summarize_command)

    publish_parser = subparsers.add_parser(
        "publish-cases", help="Push a day's summarized cases to the document store"
    )
    publish_parser.add_argument("--date", help="Day to publish (YYYY-MM-DD)", type=str)
    publish_parser.set_defaults(func=publish_cases_command)

    index_parser = subparsers.add_parser("build-index", help="Build the static index files")
    index_parser.add_argument(
        "--from-store", action="store_true", help="Read cases from the document store"
    )
    index_parser.set_defaults(func=build_index_command)

    for name, func, label in (
        ("clean-news", clean_news_command, "news items"),
        ("clean-cases", clean_cases_command, "cases"),
    ):
        clean_parser = subparsers.add_parser(name, help=f"Delete old {label} from the store")
        clean_parser.add_argument(
            "--days", help="Retention in days (default: CLEANUP_DAYS)", type=int
        )
        clean_parser.set_defaults(func=func)

    backfill_parser = subparsers.add_parser(
        "backfill-perms", help="Add public-read permissions to stored documents"
    )
    backfill_parser.add_argument(
        "--collection", choices=["cases", "news", "all"], default="all", help="Collection to fix"
    )
    backfill_parser.set_defaults(func=backfill_perms_command)

    list_parser = subparsers.add_parser("list-sources", help="List configured sources")
    list_parser.set_defaults(func=list_sources_command)

    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose >= 2:
        args.verbose = logging.DEBUG
    elif args.verbose >= 1:
        args.verbose = logging.INFO
    else:
        args.verbose = logging.WARNING

    logger = setup_logger("cli", level=args.verbose)

    try:
        load_env()
        args.settings = Settings.from_env()
        args.func(args)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Configuration error: {str(e)}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.error(f"{args.command} failed: {str(e)}")
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
