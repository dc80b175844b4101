"""
Indian Kanoon API fetcher.

The paid API exposes a paginated search endpoint and a per-document detail
endpoint. Searches are run over yesterday's judgments for one doctype
(``supremecourt``, ``delhi``, ...) and the largest documents are fetched in
full.
"""

from datetime import timedelta
from typing import Callable, List, Optional, Dict, Any

from ..utils.base import SourceFetcher
from ..utils.exceptions import ParsingError, PipelineError
from ..utils.helpers import utc_now


class IndianKanoonFetcher(SourceFetcher):
    """
    Fetcher for api.indiankanoon.org.

    Each raw item is the document detail payload (``tid``, ``title``,
    ``docsource``, ``publishdate``, ``doc``, ``bench``, ...) merged over the
    search hit it came from. ``tid`` is always a string.
    """

    kinds = ("indiankanoon",)

    def __init__(self, api_key: str, clock: Callable = utc_now, **kwargs):
        """
        Args:
            api_key: Indian Kanoon API token
            clock: Returns the current UTC time; used for the search window
            **kwargs: Passed to BaseFetcher
        """
        kwargs.setdefault("request_delay", 1.0)
        super().__init__(**kwargs)
        if not api_key:
            raise ValueError("An Indian Kanoon API key is required")
        self.clock = clock
        self.session.headers.update(
            {"Authorization": f"Token {api_key}", "Accept": "application/json"}
        )

    @property
    def base_url(self) -> str:
        return "https://api.indiankanoon.org"

    def search(
        self, doctypes: str, from_date: str, to_date: str, pagenum: int = 0
    ) -> Dict[str, Any]:
        """
        Run one search page.

        Args:
            doctypes: Indian Kanoon doctype filter
            from_date: Window start as DD-MM-YYYY
            to_date: Window end as DD-MM-YYYY
            pagenum: Zero-based page number

        Returns:
            Dict with ``docs`` (list of hits with string ``tid``) and ``found``

        Raises:
            ParsingError: If the response does not have the search shape
        """
        self.logger.info(
            f"Searching {doctypes} cases from {from_date} to {to_date}, page {pagenum}"
        )
        params = {
            "formInput": "",
            "fromdate": from_date,
            "todate": to_date,
            "doctypes": doctypes,
            "pagenum": str(pagenum),
        }
        url = f"{self.base_url}/search/"
        data = self._get_json(url, method="POST", params=params)

        if not isinstance(data, dict) or not isinstance(data.get("docs"), list):
            raise ParsingError("Unexpected search response shape", url=url)

        docs = []
        for hit in data["docs"]:
            if not isinstance(hit, dict) or hit.get("tid") is None or not hit.get("title"):
                self.logger.warning(f"Skipping malformed search hit: {hit!r}")
                continue
            hit = dict(hit)
            hit["tid"] = str(hit["tid"])
            docs.append(hit)

        found = data.get("found")
        if isinstance(found, str) and found.isdigit():
            found = int(found)
        if not isinstance(found, int):
            found = len(docs)

        self.logger.info(f"Found {found} total cases, {len(docs)} on page {pagenum}")
        return {"docs": docs, "found": found}

    def fetch_document(self, tid: str) -> Dict[str, Any]:
        """
        Fetch one full document.

        Raises:
            ParsingError: If the response lacks the document fields
        """
        self.logger.info(f"Fetching document {tid}")
        url = f"{self.base_url}/doc/{tid}/"
        data = self._get_json(
            url, method="POST", params={"maxcites": "20", "maxcitedby": "20"}
        )
        if not isinstance(data, dict) or not data.get("title"):
            raise ParsingError(f"Document {tid} has no title", url=url)

        data = dict(data)
        data["tid"] = str(data.get("tid") or tid)
        return data

    def _fetch(self, descriptor) -> List[Dict[str, Any]]:
        day = (self.clock() - timedelta(days=descriptor.lookback_days)).strftime(
            "%d-%m-%Y"
        )

        candidates = self._collect_candidates(descriptor, day, day)
        self.logger.info(
            f"{len(candidates)} {descriptor.name} candidates above "
            f"{descriptor.min_docsize} characters"
        )

        documents = []
        for hit in candidates[: descriptor.limit]:
            document = self._fetch_candidate(hit)
            if document is not None:
                documents.append(document)
            self._pause()
        return documents

    def _collect_candidates(self, descriptor, from_date: str, to_date: str) -> List[Dict[str, Any]]:
        """Page through search results until enough substantive documents are found."""
        candidates = []
        seen = 0
        for pagenum in range(descriptor.max_pages):
            page = self.search(descriptor.doctypes, from_date, to_date, pagenum)
            if not page["docs"]:
                break

            seen += len(page["docs"])
            # Very short documents are routine orders
            candidates.extend(
                hit for hit in page["docs"]
                if _docsize(hit) > descriptor.min_docsize
            )

            if len(candidates) >= descriptor.limit or seen >= page["found"]:
                break
            self._pause()
        return candidates

    def _fetch_candidate(self, hit: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            document = self.fetch_document(hit["tid"])
        except PipelineError as e:
            self.logger.error(f"Failed to fetch document {hit['tid']}: {str(e)}")
            return None
        merged = dict(hit)
        merged.update(document)
        return merged


def _docsize(hit: Dict[str, Any]) -> int:
    try:
        return int(hit.get("docsize") or 0)
    except (TypeError, ValueError):
        return 0
