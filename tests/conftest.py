"""Shared test fixtures for the pocket-kindle test suite."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from typer.testing import CliRunner

from pocket_kindle.config import Settings
from pocket_kindle.models import Article

SAMPLE_CONSUMER_KEY = "1234-abcd1234abcd1234abcd1234"
SAMPLE_REQUEST_CODE = "dcba4321-dcba-4321-dcba-4321dc"
SAMPLE_ACCESS_TOKEN = "xyz"


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_POCKET_ITEM = {
    "item_id": "229279689",
    "resolved_id": "229279689",
    "given_url": "http://www.grantland.com/blog/the-triangle/post/_/id/38347/ryder-cup-preview",
    "given_title": "The Massive Ryder Cup Preview",
    "resolved_title": "The Massive Ryder Cup Preview - The Triangle Blog - Grantland",
    "resolved_url": "http://www.grantland.com/blog/the-triangle/post/_/id/38347/ryder-cup-preview",
    "excerpt": "The list of things I love about the Ryder Cup is so long.",
    "images": {
        "1": {
            "item_id": "229279689",
            "image_id": "1",
            "src": "http://a.espncdn.com/combiner/i?img=/photo/2012/0927/grant_g_ryder_cr_640.jpg",
        }
    },
}

MOCK_POCKET_ITEM_2 = {
    "item_id": "229279690",
    "given_url": "https://example.com/second",
    "given_title": "",
    "resolved_title": "Second Article",
    "resolved_url": "https://example.com/second",
}

MOCK_ARTICLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Ryder Cup Preview</title>
  <script>var tracking = true;</script>
  <style>body { color: red; }</style>
</head>
<body>
  <nav><a href="/">Home</a></nav>
  <article>
    <h1>Ryder Cup Preview</h1>
    <p>The list of things I love about the Ryder Cup is so long.</p>
  </article>
  <footer>Copyright</footer>
</body>
</html>
"""


@pytest.fixture
def state_dir(tmp_path):
    """Empty directory for the session state file."""
    return tmp_path / "state"


@pytest.fixture
def settings(state_dir):
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        pocket_platform_consumer_key=SAMPLE_CONSUMER_KEY,
        state_dir=str(state_dir),
        callback_host="127.0.0.1",
        callback_port=0,
    )


@pytest.fixture
def mail_settings(settings):
    return settings.model_copy(
        update={
            "send_to_kindle_email": "reader@kindle.com",
            "email_user": "me@example.com",
            "email_password": "app-password",
        }
    )


@pytest.fixture
def mock_pocket_api():
    """Mock Pocket API satisfying the PocketApi protocol."""
    api = MagicMock()
    api.request_code = AsyncMock(return_value=SAMPLE_REQUEST_CODE)
    api.exchange_code = AsyncMock(return_value=SAMPLE_ACCESS_TOKEN)
    api.list_articles = AsyncMock(
        return_value=[
            Article.from_pocket_item(MOCK_POCKET_ITEM),
            Article.from_pocket_item(MOCK_POCKET_ITEM_2),
        ]
    )
    api.mark_as_sent = AsyncMock(return_value=None)
    api.close = AsyncMock(return_value=None)
    return api


@pytest.fixture
def sample_articles():
    return [
        Article.from_pocket_item(MOCK_POCKET_ITEM),
        Article.from_pocket_item(MOCK_POCKET_ITEM_2),
    ]


@pytest.fixture
def cli_runner():
    """Create a CLI test runner."""
    return CliRunner()
