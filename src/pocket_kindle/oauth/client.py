"""Pocket API client.

Covers the three-legged authorization flow and the two resource calls the
app needs:
1. Obtain a request code
2. Exchange the approved code for an access token
3. List saved items
4. Tag items as sent
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from ..errors import UpstreamError
from ..models import Article, ArticleId

logger = logging.getLogger(__name__)

POCKET_AUTHORIZE_URL = "https://getpocket.com/auth/authorize"
POCKET_API_BASE = "https://getpocket.com"
POCKET_OAUTH_REQUEST_PATH = "/v3/oauth/request"
POCKET_OAUTH_AUTHORIZE_PATH = "/v3/oauth/authorize"
POCKET_GET_PATH = "/v3/get"
POCKET_SEND_PATH = "/v3/send"

SENT_TAG = "sent-to-kindle"


def build_authorization_url(request_code: str, redirect_uri: str) -> str:
    """Consent page URL the user must visit to approve the app."""
    query = urlencode({"request_token": request_code, "redirect_uri": redirect_uri})
    return f"{POCKET_AUTHORIZE_URL}?{query}"


class PocketClient:
    """Async client for the Pocket v3 API.

    Usage:
        async with PocketClient(consumer_key="...") as pocket:
            code = await pocket.request_code("http://127.0.0.1:8080")
            # user approves build_authorization_url(code, redirect_uri)
            token = await pocket.exchange_code(code)
            articles = await pocket.list_articles(token)
    """

    def __init__(
        self,
        consumer_key: str,
        base_url: str = POCKET_API_BASE,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.consumer_key = consumer_key
        self.base_url = base_url
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json; charset=UTF-8"},
            timeout=timeout,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and decode the JSON reply.

        Raises:
            UpstreamError: On transport failure, non-2xx status or a non-object body
        """
        body = {"consumer_key": self.consumer_key, **payload}

        try:
            response = await self._client.post(
                path,
                json=body,
                headers={"X-Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Pocket request to {path} failed: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(
                f"Pocket API error on {path}: {response.status_code}",
                status_code=response.status_code,
                details={
                    "error": response.headers.get("X-Error"),
                    "error_code": response.headers.get("X-Error-Code"),
                },
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Pocket API returned invalid JSON on {path}",
                status_code=response.status_code,
                details={"raw_response": response.text[:500]},
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                f"Pocket API returned an unexpected body on {path}",
                status_code=response.status_code,
            )

        logger.debug("Pocket %s -> keys %s", path, sorted(data.keys()))
        return data

    async def request_code(self, redirect_uri: str) -> str:
        """Obtain a short-lived request code.

        Raises:
            UpstreamError: If the call fails or the reply lacks `code`
        """
        data = await self._post(POCKET_OAUTH_REQUEST_PATH, {"redirect_uri": redirect_uri})

        code = data.get("code")
        if not isinstance(code, str) or not code:
            raise UpstreamError(
                "Invalid request-code response: missing code",
                details={"response_keys": list(data.keys())},
            )
        return code

    async def exchange_code(self, code: str) -> str:
        """Exchange an approved request code for an access token.

        Raises:
            UpstreamError: If the call fails or the reply lacks `access_token`
        """
        data = await self._post(POCKET_OAUTH_AUTHORIZE_PATH, {"code": code})

        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise UpstreamError(
                "Invalid authorize response: missing access_token",
                details={"response_keys": list(data.keys())},
            )
        return access_token

    async def list_articles(
        self,
        access_token: str,
        count: int | None = None,
        tag: str | None = None,
    ) -> list[Article]:
        """List saved items, newest first."""
        payload: dict[str, Any] = {
            "access_token": access_token,
            "detailType": "complete",
            "sort": "newest",
        }
        if count:
            payload["count"] = count
        if tag:
            payload["tag"] = tag

        data = await self._post(POCKET_GET_PATH, payload)

        items = data.get("list") or {}
        # Pocket returns an empty list instead of an empty object when nothing matches.
        if isinstance(items, list):
            items = {}
        if not isinstance(items, dict):
            raise UpstreamError("Invalid get response: list must be an object")

        try:
            articles = [Article.from_pocket_item(item) for item in items.values()]
        except (KeyError, TypeError, AttributeError) as e:
            raise UpstreamError(f"Invalid get response item: {e}") from e

        logger.info("Listed %d Pocket articles", len(articles))
        return articles

    async def mark_as_sent(
        self,
        access_token: str,
        ids: list[ArticleId],
        tag: str = SENT_TAG,
    ) -> dict[str, Any]:
        """Tag items so they are recognisable as already delivered."""
        actions = [{"action": "tags_add", "tags": tag, "item_id": item_id} for item_id in ids]

        data = await self._post(
            POCKET_SEND_PATH,
            {"access_token": access_token, "actions": json.dumps(actions)},
        )
        logger.info("Tagged %d Pocket articles as %s", len(ids), tag)
        return data
