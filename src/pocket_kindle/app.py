"""Composition root: wires settings, collaborators and services together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .auth.manager import SessionManager
from .config import Settings
from .errors import ConfigError
from .events.bridge import RequestResponseBridge
from .events.channel import EventChannel
from .interfaces import DocumentSender
from .kindle.mailer import SmtpKindleMailer
from .models import ConversionResult
from .oauth.client import PocketClient
from .readability.converter import ReadabilityConverter
from .services.pocket import PocketService
from .services.send_to_kindle import SendToKindleService

logger = logging.getLogger(__name__)


@dataclass
class App:
    """Application object graph for one process."""

    settings: Settings
    channel: EventChannel
    client: PocketClient
    session: SessionManager
    bridge: RequestResponseBridge[ConversionResult]
    converter: ReadabilityConverter
    pocket: PocketService
    sender: DocumentSender | None = None

    @property
    def send_to_kindle(self) -> SendToKindleService:
        if self.sender is None:
            raise ConfigError(
                "Mail not configured. Set SEND_TO_KINDLE_EMAIL, EMAIL_USER and EMAIL_PASSWORD."
            )
        return SendToKindleService(self.session, self.client, self.converter, self.sender)

    async def aclose(self) -> None:
        await self.session.aclose()
        self.bridge.close()
        await self.converter.close()
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()


def build_app(
    settings: Settings | None = None,
    *,
    client: PocketClient | None = None,
    sender: DocumentSender | None = None,
    channel: EventChannel | None = None,
) -> App:
    """Build the application from settings, allowing collaborators to be swapped.

    Raises:
        ConfigError: If no consumer key is configured and no client is given
    """
    settings = settings or Settings()
    channel = channel or EventChannel()

    if client is None:
        client = PocketClient(settings.require_consumer_key(), timeout=settings.http_timeout)

    if sender is None and settings.mail_configured:
        sender = SmtpKindleMailer.from_settings(settings)

    session = SessionManager.from_settings(settings, client)
    bridge: RequestResponseBridge[ConversionResult] = RequestResponseBridge(channel)
    converter = ReadabilityConverter(bridge, timeout=settings.http_timeout)

    logger.debug("Session state file: %s", settings.state_file)

    return App(
        settings=settings,
        channel=channel,
        client=client,
        session=session,
        bridge=bridge,
        converter=converter,
        pocket=PocketService(session, client),
        sender=sender,
    )
