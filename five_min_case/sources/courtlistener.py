"""
CourtListener fetcher.

CourtListener is a free law project providing access to US federal and state
case law. Its v4 search API is paginated with a ``next`` cursor link.
"""

from datetime import timedelta
from typing import Callable, List, Optional, Dict, Any

from ..utils.base import SourceFetcher
from ..utils.exceptions import ParsingError
from ..utils.helpers import utc_now


class CourtListenerFetcher(SourceFetcher):
    """
    Fetcher for the CourtListener opinion search API.

    Raw items are search results as returned by the API (``caseName``,
    ``dateFiled``, ``court``, ``absolute_url``, ``cluster_id``, ...).
    Without an API token the source is skipped.
    """

    kinds = ("courtlistener",)

    def __init__(self, api_token: Optional[str] = None, clock: Callable = utc_now, **kwargs):
        kwargs.setdefault("request_delay", 1.0)
        super().__init__(**kwargs)
        self.api_token = api_token
        self.clock = clock
        if api_token:
            self.session.headers.update({"Authorization": f"Token {api_token}"})

    @property
    def base_url(self) -> str:
        return "https://www.courtlistener.com"

    def _fetch(self, descriptor) -> List[Dict[str, Any]]:
        if not self.api_token:
            self.logger.info(
                "CourtListener scraping is disabled until an API token is configured"
            )
            return []

        filed_after = (self.clock() - timedelta(days=descriptor.lookback_days)).strftime(
            "%Y-%m-%d"
        )
        params = {
            "type": "o",
            "order_by": "dateFiled desc",
            "filed_after": filed_after,
        }
        if descriptor.courts:
            params["court"] = " ".join(descriptor.courts)

        url = f"{self.base_url}/api/rest/v4/search/"
        results = []
        while url and len(results) < descriptor.limit:
            data = self._get_json(url, params=params)
            if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                raise ParsingError("Unexpected search response shape", url=url)

            results.extend(item for item in data["results"] if isinstance(item, dict))

            # The cursor link already carries the query string
            url = data.get("next")
            params = None
            if url:
                self._pause()

        return results
