"""Tests for PocketService and SendToKindleService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pocket_kindle.errors import NoLoginInProgress, UpstreamError
from pocket_kindle.auth.login import LoginStart
from pocket_kindle.services.pocket import PocketService
from pocket_kindle.services.send_to_kindle import SendToKindleService
from tests.conftest import SAMPLE_ACCESS_TOKEN


@pytest.fixture
def mock_session():
    """Mock session satisfying the SessionPort protocol."""
    session = MagicMock()
    session.is_logged_in.return_value = True
    session.logout = AsyncMock(return_value=True)
    session.start_login = AsyncMock(return_value=LoginStart(auth_url="https://getpocket.com/auth/authorize?x"))
    session.await_login = AsyncMock(return_value=SAMPLE_ACCESS_TOKEN)
    session.access_token.return_value = SAMPLE_ACCESS_TOKEN
    return session


@pytest.fixture
def mock_converter():
    converter = MagicMock()
    converter.convert = AsyncMock(side_effect=lambda a: a.with_contents(f"<p>{a.id}</p>"))
    return converter


@pytest.fixture
def mock_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=None)
    return sender


class TestPocketService:
    def test_is_login(self, mock_session, mock_pocket_api):
        service = PocketService(mock_session, mock_pocket_api)
        assert service.is_login() is True

    @pytest.mark.asyncio
    async def test_logout(self, mock_session, mock_pocket_api):
        service = PocketService(mock_session, mock_pocket_api)
        assert await service.logout() is True
        mock_session.logout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_login_returns_url(self, mock_session, mock_pocket_api):
        service = PocketService(mock_session, mock_pocket_api)
        assert await service.start_login() == "https://getpocket.com/auth/authorize?x"

    @pytest.mark.asyncio
    async def test_start_login_when_logged_in(self, mock_session, mock_pocket_api):
        mock_session.start_login.return_value = LoginStart()
        service = PocketService(mock_session, mock_pocket_api)
        assert await service.start_login() is None

    @pytest.mark.asyncio
    async def test_list_persists_after_success(self, mock_session, mock_pocket_api):
        service = PocketService(mock_session, mock_pocket_api)

        articles = await service.list(count=5)

        assert len(articles) == 2
        mock_session.await_login.assert_awaited_once()
        mock_pocket_api.list_articles.assert_awaited_once_with(SAMPLE_ACCESS_TOKEN, count=5)
        mock_session.persist.assert_called_once()

    @pytest.mark.asyncio
    async def test_list_failure_does_not_persist(self, mock_session, mock_pocket_api):
        mock_pocket_api.list_articles.side_effect = UpstreamError("Unauthorized", status_code=401)
        service = PocketService(mock_session, mock_pocket_api)

        with pytest.raises(UpstreamError):
            await service.list()

        mock_session.persist.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_without_login(self, mock_session, mock_pocket_api):
        mock_session.await_login.side_effect = NoLoginInProgress()
        service = PocketService(mock_session, mock_pocket_api)

        with pytest.raises(NoLoginInProgress):
            await service.list()

        mock_pocket_api.list_articles.assert_not_awaited()


class TestSendToKindleService:
    @pytest.mark.asyncio
    async def test_send_marks_converts_and_delivers(
        self, mock_session, mock_pocket_api, mock_converter, mock_sender, sample_articles
    ):
        service = SendToKindleService(mock_session, mock_pocket_api, mock_converter, mock_sender)

        sent = await service.send(sample_articles)

        mock_pocket_api.mark_as_sent.assert_awaited_once_with(
            SAMPLE_ACCESS_TOKEN, ["229279689", "229279690"]
        )
        assert [a.contents for a in sent] == ["<p>229279689</p>", "<p>229279690</p>"]
        mock_sender.send.assert_awaited_once_with(sent)

    @pytest.mark.asyncio
    async def test_send_nothing(
        self, mock_session, mock_pocket_api, mock_converter, mock_sender
    ):
        service = SendToKindleService(mock_session, mock_pocket_api, mock_converter, mock_sender)

        assert await service.send([]) == []

        mock_pocket_api.mark_as_sent.assert_not_awaited()
        mock_sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_conversion_failure_stops_delivery(
        self, mock_session, mock_pocket_api, mock_converter, mock_sender, sample_articles
    ):
        mock_converter.convert.side_effect = UpstreamError("Fetching failed", status_code=404)
        service = SendToKindleService(mock_session, mock_pocket_api, mock_converter, mock_sender)

        with pytest.raises(UpstreamError):
            await service.send(sample_articles)

        mock_sender.send.assert_not_awaited()
