"""Send selected articles to Kindle."""

from __future__ import annotations

import logging

from ..interfaces import ContentConverter, DocumentSender, PocketApi, SessionPort
from ..models import Article

logger = logging.getLogger(__name__)


class SendToKindleService:
    """Tags articles as sent, converts them one by one, then mails the bundle."""

    def __init__(
        self,
        session: SessionPort,
        api: PocketApi,
        converter: ContentConverter,
        sender: DocumentSender,
    ):
        self.session = session
        self.api = api
        self.converter = converter
        self.sender = sender

    async def send(self, articles: list[Article]) -> list[Article]:
        """Deliver articles and return them with their converted contents."""
        if not articles:
            logger.info("Nothing to send")
            return []

        access_token = self.session.access_token()
        await self.api.mark_as_sent(access_token, [a.id for a in articles])

        # Sequential: the converter's bridge allows one exchange at a time.
        converted = []
        for article in articles:
            converted.append(await self.converter.convert(article))

        await self.sender.send(converted)
        return converted
