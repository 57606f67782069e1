"""Domain models shared across the service layer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from pydantic import BaseModel, Field, model_validator

ArticleId = str


@dataclass
class Article:
    """A saved Pocket item, optionally with its readable contents."""

    id: ArticleId
    title: str
    url: str
    contents: str = ""
    cover: str | None = None

    def with_contents(self, contents: str) -> "Article":
        return replace(self, contents=contents)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return asdict(self)

    @classmethod
    def from_pocket_item(cls, item: dict[str, Any]) -> "Article":
        """Build an article from one entry of the Pocket `get` response list."""
        images = item.get("images") or {}
        cover = None
        if isinstance(images, dict) and isinstance(images.get("1"), dict):
            cover = images["1"].get("src")

        return cls(
            id=str(item["item_id"]),
            title=item.get("given_title") or item.get("resolved_title") or "",
            url=item.get("given_url") or item.get("resolved_url") or "",
            contents=item.get("excerpt") or "",
            cover=cover,
        )


class ConversionResult(BaseModel):
    """Readable-content reply produced by the renderer."""

    title: str
    content: str
    excerpt: str = ""
    text_content: str | None = Field(default=None, alias="textContent")
    length: int | None = None
    byline: str | None = None
    dir: str | None = None
    site_name: str | None = Field(default=None, alias="siteName")
    lang: str | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _unwrap_article(cls, data: Any) -> Any:
        # Renderers may reply with {"article": {...}}.
        if isinstance(data, dict) and isinstance(data.get("article"), dict):
            return data["article"]
        return data
