"""
HTTP page fetcher shared by link discovery and decklist extraction.

Bounds every request with a timeout and maps transport failures onto the
pipeline's error taxonomy. Pacing between requests is the caller's job.
"""

import json
from types import TracebackType
from typing import Any

import httpx

from decklist_scraper.models.errors import HttpError, NetworkError, ParseError

DEFAULT_TIMEOUT = 60.0
DEFAULT_USER_AGENT = "decklist-scraper/1.0"


class PageFetcher:
    """
    Fetches pages over HTTP.

    Pass an existing client to share a connection pool, otherwise the
    fetcher creates and owns one and closes it in ``aclose()``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            timeout=timeout,
        )

    async def fetch(self, url: str) -> str:
        """
        Fetch a page and return its body as text.

        Raises:
            NetworkError: On timeout or connection failure
            HttpError: On a non-success status
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HttpError(e.response.status_code, url) from e
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out fetching {url}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e

        return response.text

    async def fetch_json(self, url: str) -> Any:
        """
        Fetch a JSON document.

        Raises:
            NetworkError: On timeout or connection failure
            HttpError: On a non-success status
            ParseError: If the body is not valid JSON
        """
        text = await self.fetch(url)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
