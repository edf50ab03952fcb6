"""Brave Search web search client."""

import logging
from typing import Optional

import httpx

from chainagent.errors import SearchError

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"

DEFAULT_RESULT_COUNT = 10


class BraveSearchClient:
    """Runs web searches and returns the response body untouched."""

    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        count: int = DEFAULT_RESULT_COUNT,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.count = count
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_headers(self) -> dict:
        return {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": self.api_key,
        }

    async def search(self, query: str) -> str:
        """Search the web for `query`.

        Returns:
            Raw JSON response text

        Raises:
            SearchError: On transport failure or non-2xx status
        """
        try:
            response = await self.client.get(
                BRAVE_SEARCH_URL,
                headers=self._get_headers(),
                params={"q": query, "count": str(self.count)},
            )
        except httpx.HTTPError as e:
            logger.error(f"Brave search request failed: {e}")
            raise SearchError(0, str(e)) from e

        if not response.is_success:
            logger.warning(f"Brave Search API error: {response.status_code}")
            raise SearchError(response.status_code, response.text)

        return response.text

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
