"""Tests for regex-based readable-content extraction."""

from pocket_kindle.readability.extract import (
    EXCERPT_LENGTH,
    extract_article,
    extract_content,
    extract_title,
)
from tests.conftest import MOCK_ARTICLE_HTML


class TestExtractTitle:
    def test_title_tag(self):
        assert extract_title("<html><head><title> A &amp; B </title></head></html>") == "A & B"

    def test_og_title_wins(self):
        raw = (
            '<head><meta property="og:title" content="Social Title">'
            "<title>Page Title</title></head>"
        )
        assert extract_title(raw) == "Social Title"

    def test_missing_title(self):
        assert extract_title("<p>No head</p>") == ""


class TestExtractContent:
    def test_prefers_article_and_drops_chrome(self):
        content = extract_content(MOCK_ARTICLE_HTML)

        assert content.startswith("<h1>Ryder Cup Preview</h1>")
        assert "tracking" not in content
        assert "Home" not in content
        assert "Copyright" not in content

    def test_falls_back_to_main(self):
        raw = "<body><nav>menu</nav><main><p>Main text</p></main></body>"
        assert extract_content(raw) == "<p>Main text</p>"

    def test_skips_empty_article(self):
        raw = "<body><article>   </article><p>Body text</p></body>"
        assert "Body text" in extract_content(raw)

    def test_strips_comments(self):
        raw = "<body><!-- <article>hidden</article> --><p>Shown</p></body>"
        assert extract_content(raw) == "<p>Shown</p>"


class TestExtractArticle:
    def test_article_shape(self):
        article = extract_article(MOCK_ARTICLE_HTML)

        assert article["title"] == "Ryder Cup Preview"
        assert article["lang"] == "en"
        assert article["textContent"].startswith("Ryder Cup Preview The list of things")
        assert article["length"] == len(article["textContent"])
        assert article["excerpt"] == article["textContent"]

    def test_long_excerpt_is_truncated_on_word(self):
        raw = "<body><p>" + "word " * 100 + "</p></body>"

        excerpt = extract_article(raw)["excerpt"]

        assert excerpt.endswith("...")
        assert len(excerpt) <= EXCERPT_LENGTH + 3
        assert "wor..." not in excerpt
