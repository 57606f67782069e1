"""Article conversion through the readability bridge."""

from __future__ import annotations

import logging

import httpx

from ..errors import UpstreamError
from ..events.bridge import RequestResponseBridge
from ..models import Article, ConversionResult

logger = logging.getLogger(__name__)


class ReadabilityConverter:
    """Fetches an article's page and has the renderer rewrite it.

    The renderer lives behind the bridge (a webview, or the local worker);
    this class never parses HTML itself.
    """

    def __init__(
        self,
        bridge: RequestResponseBridge[ConversionResult],
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._bridge = bridge
        self._client = http_client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self):
        await self._client.aclose()

    async def fetch(self, url: str) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Fetching {url} failed: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Fetching {url} failed: {e}") from e
        return response.text

    async def convert(self, article: Article) -> Article:
        """Return the article with its readable HTML as contents."""
        raw_content = await self.fetch(article.url)
        logger.info("Converting %s (%d bytes)", article.url, len(raw_content))

        result = await self._bridge.exchange({"rawContent": raw_content})
        return article.with_contents(result.content)
