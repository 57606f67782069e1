"""SMTP delivery of article bundles to a Send-to-Kindle address."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from ..config import Settings
from ..errors import ConfigError, DeliveryError
from ..interfaces import DocumentEncoder
from ..models import Article
from .encoder import HtmlBundleEncoder

logger = logging.getLogger(__name__)

SUBJECT = "Send Pocket articles to Kindle"
MAX_ATTACHMENT_BYTES = 50 * 1024 * 1024


class SmtpKindleMailer:
    """Sends converted articles as one attachment over SMTP (STARTTLS + login)."""

    def __init__(
        self,
        send_to: str,
        send_from: str,
        password: str,
        host: str = "smtp.gmail.com",
        port: int = 587,
        encoder: DocumentEncoder | None = None,
    ):
        self.send_to = send_to
        self.send_from = send_from
        self._password = password
        self.host = host
        self.port = port
        self.encoder = encoder or HtmlBundleEncoder()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpKindleMailer":
        if not settings.mail_configured:
            raise ConfigError(
                "Mail not configured. Set SEND_TO_KINDLE_EMAIL, EMAIL_USER and EMAIL_PASSWORD."
            )
        return cls(
            send_to=settings.send_to_kindle_email,
            send_from=settings.email_user,
            password=settings.email_password,
            host=settings.smtp_host,
            port=settings.smtp_port,
        )

    def build_message(self, articles: list[Article]) -> EmailMessage:
        attachment = self.encoder.encode(articles)
        if len(attachment) > MAX_ATTACHMENT_BYTES:
            raise DeliveryError(
                f"Attachment is {len(attachment)} bytes; Kindle accepts at most {MAX_ATTACHMENT_BYTES}."
            )

        maintype, _, subtype = self.encoder.content_type.partition("/")

        message = EmailMessage()
        message["From"] = self.send_from
        message["To"] = self.send_to
        message["Subject"] = SUBJECT
        message.set_content(f"{len(articles)} article(s) from Pocket.")
        message.add_attachment(
            attachment,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=self.encoder.filename,
        )
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=60) as smtp:
                smtp.starttls()
                smtp.login(self.send_from, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Could not send email: {e}") from e

    async def send(self, articles: list[Article]) -> None:
        logger.info("Sending %d articles to %s", len(articles), self.send_to)
        message = self.build_message(articles)
        await asyncio.get_running_loop().run_in_executor(None, self._send_sync, message)
        logger.info("Email sent successfully")
