"""
Base HTTP plumbing shared by source fetchers, LLM providers and the store.
"""

import time
import requests
from abc import ABC, abstractmethod
from typing import List, Dict, Any

from .exceptions import (
    PipelineError,
    NetworkError,
    RateLimitError,
    ParsingError,
    AuthenticationError,
    DataNotFoundError,
    ConflictError,
)
from .helpers import setup_logger


class BaseFetcher(ABC):
    """
    Base class for everything that talks HTTP.

    Provides common functionality including:
    - HTTP session management
    - A flat inter-request delay
    - Status code to exception mapping
    - Logging

    Requests are never retried: a failed call raises and the caller decides
    whether to skip the unit of work.
    """

    def __init__(
        self,
        request_delay: float = 0.0,
        timeout: int = 30,
        user_agent: str = None,
    ):
        """
        Initialize the fetcher.

        Args:
            request_delay: Seconds to sleep between consecutive calls
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
        """
        self.request_delay = request_delay
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent or self._default_user_agent(),
                "Accept": "application/json, application/rss+xml, application/xml;q=0.9, */*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            }
        )

        self.logger = setup_logger(f"{self.__class__.__name__}")

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL of the remote service."""
        pass

    def _default_user_agent(self) -> str:
        return "five-min-case/1.0 (+https://github.com/five-min-case/five-min-case)"

    def _pause(self):
        """Sleep for the configured flat delay."""
        if self.request_delay > 0:
            self.logger.debug(f"Pausing {self.request_delay:.2f}s between requests")
            time.sleep(self.request_delay)

    def _make_request(
        self,
        url: str,
        method: str = "GET",
        params: Dict[str, Any] = None,
        data: Dict[str, Any] = None,
        json: Any = None,
        headers: Dict[str, str] = None,
    ) -> requests.Response:
        """
        Make a single HTTP request and map failures to pipeline exceptions.

        Args:
            url: URL to request
            method: HTTP method
            params: Query parameters
            data: Form data
            json: JSON body
            headers: Additional headers

        Returns:
            Response object for any 2xx status

        Raises:
            NetworkError: For transport failures and unexpected statuses
            RateLimitError: On 429
            AuthenticationError: On 401/403
            DataNotFoundError: On 404
            ConflictError: On 409
        """
        self.logger.debug(f"Making {method} request to {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request timeout: {str(e)}", url=url) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Connection failed: {str(e)}", url=url) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request failed: {str(e)}", url=url) from e

        status = response.status_code
        if 200 <= status < 300:
            return response
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limited (429)",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                url=url,
            )
        if status in (401, 403):
            raise AuthenticationError(
                f"Authentication required ({status})", url=url, status_code=status
            )
        if status == 404:
            raise DataNotFoundError("Not found", url=url, status_code=status)
        if status == 409:
            raise ConflictError("Already exists", url=url, status_code=status)
        if status >= 500:
            raise NetworkError(f"Server error ({status})", url=url, status_code=status)
        raise NetworkError(f"HTTP {status}", url=url, status_code=status)

    def _get_json(self, url: str, **kwargs) -> Any:
        """Make a request and decode its JSON body."""
        response = self._make_request(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ParsingError(f"Invalid JSON response: {str(e)}", url=url) from e

    def close(self):
        """Close the HTTP session."""
        if hasattr(self, "session"):
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class SourceFetcher(BaseFetcher):
    """
    A fetcher for one kind of source descriptor.

    Subclasses implement ``_fetch``; ``fetch`` wraps it so a failing source
    logs and yields an empty list instead of aborting the run.
    """

    #: Descriptor kinds this fetcher handles
    kinds: tuple = ()

    @abstractmethod
    def _fetch(self, descriptor) -> List[Dict[str, Any]]:
        """Return raw items for the descriptor, raising on failure."""
        pass

    def fetch(self, descriptor) -> List[Dict[str, Any]]:
        """
        Fetch raw items for a source descriptor.

        Args:
            descriptor: Source descriptor whose ``kind`` is in ``self.kinds``

        Returns:
            At most ``descriptor.limit`` raw items, or an empty list if the
            source failed
        """
        if descriptor.kind not in self.kinds:
            raise ValueError(
                f"{self.__class__.__name__} cannot fetch {descriptor.kind!r} sources"
            )

        try:
            items = self._fetch(descriptor)
        except PipelineError as e:
            self.logger.warning(f"Skipping source {descriptor.name}: {str(e)}")
            return []
        except Exception as e:
            self.logger.error(
                f"Unexpected failure fetching {descriptor.name}: {str(e)}"
            )
            return []

        items = items[: descriptor.limit]
        self.logger.info(f"Fetched {len(items)} items from {descriptor.name}")
        return items
