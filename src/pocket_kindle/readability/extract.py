"""Lightweight readable-content extraction from raw HTML.

Regex based: pulls the document title, drops non-content elements and keeps
the most article-like container (`<article>`, `<main>` or `<body>`).
"""

from __future__ import annotations

import html as html_lib
import re
from typing import Any

_TITLE_RE = re.compile(r"<title\b[^>]*>(?P<title>[\s\S]*?)</title\s*>", re.IGNORECASE)
_OG_TITLE_RE = re.compile(
    r"<meta\s+[^>]*property\s*=\s*(['\"])og:title\1[^>]*content\s*=\s*(['\"])(?P<title>.*?)\2",
    re.IGNORECASE | re.DOTALL,
)
_LANG_RE = re.compile(r"<html\b[^>]*\blang\s*=\s*(['\"])(?P<lang>[^'\"]+)\1", re.IGNORECASE)

_DROP_ELEMENTS = ("script", "style", "noscript", "iframe", "nav", "header", "footer", "aside", "form")
_DROP_RE = re.compile(
    r"<(?P<tag>" + "|".join(_DROP_ELEMENTS) + r")\b[^>]*>[\s\S]*?</(?P=tag)\s*>",
    re.IGNORECASE,
)
_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_CONTAINER_RES = [
    re.compile(rf"<{tag}\b[^>]*>(?P<inner>[\s\S]*?)</{tag}\s*>", re.IGNORECASE)
    for tag in ("article", "main", "body")
]
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

EXCERPT_LENGTH = 200


def _clean_text(fragment: str) -> str:
    text = _TAG_RE.sub(" ", fragment)
    return _WS_RE.sub(" ", html_lib.unescape(text)).strip()


def extract_title(raw_html: str) -> str:
    match = _OG_TITLE_RE.search(raw_html) or _TITLE_RE.search(raw_html)
    if not match:
        return ""
    return _clean_text(match.group("title"))


def extract_content(raw_html: str) -> str:
    """Return the inner HTML of the main content container."""
    cleaned = _COMMENT_RE.sub("", raw_html)
    cleaned = _DROP_RE.sub("", cleaned)

    for container_re in _CONTAINER_RES:
        match = container_re.search(cleaned)
        if match and _clean_text(match.group("inner")):
            return match.group("inner").strip()

    return cleaned.strip()


def extract_article(raw_html: str) -> dict[str, Any]:
    """Readable view of a page, shaped like the renderer's reply."""
    content = extract_content(raw_html)
    text = _clean_text(content)
    lang_match = _LANG_RE.search(raw_html)

    excerpt = text[:EXCERPT_LENGTH]
    if len(text) > EXCERPT_LENGTH:
        excerpt = excerpt.rsplit(" ", 1)[0] + "..."

    return {
        "title": extract_title(raw_html),
        "content": content,
        "textContent": text,
        "length": len(text),
        "excerpt": excerpt,
        "lang": lang_match.group("lang") if lang_match else None,
    }
