"""Pocket session and listing operations exposed to the command layer."""

from __future__ import annotations

import logging

from ..interfaces import PocketApi, SessionPort
from ..models import Article

logger = logging.getLogger(__name__)


class PocketService:
    """is_login / logout / start_login / list.

    The access token is persisted only after a successful list, so a token
    that never worked is never written to disk.
    """

    def __init__(self, session: SessionPort, api: PocketApi):
        self.session = session
        self.api = api

    def is_login(self) -> bool:
        return self.session.is_logged_in()

    async def logout(self) -> bool:
        return await self.session.logout()

    async def start_login(self) -> str | None:
        """Return the consent URL, or None when already logged in."""
        start = await self.session.start_login()
        return start.auth_url

    async def list(self, count: int | None = None) -> list[Article]:
        await self.session.await_login()
        access_token = self.session.access_token()

        articles = await self.api.list_articles(access_token, count=count)
        self.session.persist()
        return articles
