"""Attachment encoder for Send to Kindle.

Kindle accepts .html attachments, so articles are bundled into one HTML
document with a table of contents.
"""

from __future__ import annotations

import html as html_lib

from ..models import Article

_DOCUMENT = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{title}</title>
</head>
<body>
<h1>{title}</h1>
<ol>
{toc}
</ol>
{sections}
</body>
</html>
"""

_SECTION = """<section id="{anchor}">
<h2>{title}</h2>
<p><a href="{url}">{url}</a></p>
{contents}
</section>
<mbp:pagebreak />
"""


class HtmlBundleEncoder:
    """Packs articles into a single HTML attachment."""

    filename = "pocket.html"
    content_type = "text/html"

    def __init__(self, title: str = "Pocket"):
        self.title = title

    def encode(self, articles: list[Article]) -> bytes:
        toc = []
        sections = []
        for article in articles:
            anchor = f"article-{html_lib.escape(article.id, quote=True)}"
            title = html_lib.escape(article.title or article.url)
            url = html_lib.escape(article.url, quote=True)
            toc.append(f'<li><a href="#{anchor}">{title}</a></li>')
            sections.append(
                _SECTION.format(anchor=anchor, title=title, url=url, contents=article.contents)
            )

        document = _DOCUMENT.format(
            title=html_lib.escape(self.title),
            toc="\n".join(toc),
            sections="".join(sections),
        )
        return document.encode("utf-8")
