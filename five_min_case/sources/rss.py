"""
RSS/Atom feed fetcher.

Used for the Indian Kanoon court feeds, the UK judiciary feed and every
legal-news feed.
"""

from typing import List, Optional, Dict, Any

import feedparser

from ..utils.base import SourceFetcher
from ..utils.exceptions import ParsingError
from ..utils.helpers import sanitize_text, strip_html


class RSSFeedFetcher(SourceFetcher):
    """
    Fetches a feed and flattens each entry to a plain dict.

    Items carry ``title``, ``link``, ``pubDate``, ``content``,
    ``contentSnippet``, ``creator``, ``author``, ``enclosureUrl``,
    ``categories`` and ``feedUrl``. Missing fields are ``None``; nothing is
    validated here.
    """

    kinds = ("rss", "web")

    @property
    def base_url(self) -> str:
        return ""

    def _fetch(self, descriptor) -> List[Dict[str, Any]]:
        self.logger.info(f"Scraping feed {descriptor.name}: {descriptor.url}")

        response = self._make_request(descriptor.url)
        if not response.content:
            raise ParsingError("Empty feed document", url=descriptor.url)

        feed = feedparser.parse(response.content)
        if not feed.version and not feed.entries:
            raise ParsingError("Document is not an RSS or Atom feed", url=descriptor.url)
        if feed.bozo:
            self.logger.debug(f"Malformed feed {descriptor.url}: {feed.get('bozo_exception')}")

        return [
            self._parse_entry(entry, descriptor.url)
            for entry in feed.entries[: descriptor.limit]
        ]

    def _parse_entry(self, entry, feed_url: str) -> Dict[str, Any]:
        """Flatten one feedparser entry."""
        content = None
        if entry.get("content"):
            content = entry.content[0].get("value") or None
        description = entry.get("summary") or None

        snippet_source = description or content
        snippet = sanitize_text(strip_html(snippet_source)) if snippet_source else None

        # dc:creator and <author> both land in ``author``
        author = entry.get("author") or None

        return {
            "title": (entry.get("title") or "").strip() or None,
            "link": (entry.get("link") or "").strip() or None,
            "pubDate": entry.get("published") or entry.get("updated") or None,
            "content": content or description,
            "contentSnippet": snippet,
            "creator": author,
            "author": author,
            "enclosureUrl": self._enclosure_url(entry),
            "categories": [tag.get("term") for tag in entry.get("tags", []) if tag.get("term")],
            "feedUrl": feed_url,
        }

    def _enclosure_url(self, entry) -> Optional[str]:
        for enclosure in entry.get("enclosures", []):
            if enclosure.get("href"):
                return enclosure["href"]
        for media in entry.get("media_content", []) + entry.get("media_thumbnail", []):
            if media.get("url"):
                return media["url"]
        return None
