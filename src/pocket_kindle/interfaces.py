"""Interfaces and protocols for dependency injection."""

from __future__ import annotations

from typing import Any, Protocol

from .models import Article, ArticleId


class AuthorizationApi(Protocol):
    """Remote calls used by the login flow."""

    async def request_code(self, redirect_uri: str) -> str:
        """Obtain a short-lived request code."""
        ...

    async def exchange_code(self, code: str) -> str:
        """Exchange an approved request code for an access token."""
        ...


class PocketApi(AuthorizationApi, Protocol):
    """Full remote surface used by the service layer."""

    async def list_articles(self, access_token: str, count: int | None = None) -> list[Article]:
        ...

    async def mark_as_sent(self, access_token: str, ids: list[ArticleId]) -> dict[str, Any]:
        ...


class SessionPort(Protocol):
    """Session lifecycle as seen by the service layer."""

    def is_logged_in(self) -> bool:
        ...

    async def logout(self) -> bool:
        ...

    async def start_login(self) -> Any:
        ...

    async def await_login(self) -> str:
        ...

    def access_token(self) -> str:
        ...

    def persist(self) -> None:
        ...


class ContentConverter(Protocol):
    """Rewrites an article's page into readable contents."""

    async def convert(self, article: Article) -> Article:
        ...


class DocumentEncoder(Protocol):
    """Packs converted articles into a single attachment."""

    filename: str
    content_type: str

    def encode(self, articles: list[Article]) -> bytes:
        ...


class DocumentSender(Protocol):
    """Delivers converted articles to the reader device."""

    async def send(self, articles: list[Article]) -> None:
        ...
