"""In-process readability consumer for headless use.

Stands in for the webview renderer: listens for conversion requests on the
event channel and answers from its own thread, so the bridge sees the same
asynchronous request/response traffic either way.
"""

from __future__ import annotations

import logging
from threading import Thread
from typing import Any, Callable

from ..events.bridge import EVENT_REQUEST, EVENT_RESPONSE
from ..events.channel import EventChannel
from .extract import extract_article

logger = logging.getLogger(__name__)


class LocalReadabilityWorker:
    """Answers `readability-request` events with `readability-response`.

    Usage:
        worker = LocalReadabilityWorker(channel)
        worker.start()
        ...
        worker.stop()
    """

    def __init__(
        self,
        channel: EventChannel,
        request_event: str = EVENT_REQUEST,
        response_event: str = EVENT_RESPONSE,
    ):
        self._channel = channel
        self.request_event = request_event
        self.response_event = response_event
        self._unlisten: Callable[[], None] | None = None

    @property
    def running(self) -> bool:
        return self._unlisten is not None

    def start(self) -> None:
        if self._unlisten is None:
            self._unlisten = self._channel.listen(self.request_event, self._on_request)

    def stop(self) -> None:
        if self._unlisten is not None:
            self._unlisten()
            self._unlisten = None

    def _on_request(self, payload: Any) -> None:
        raw = payload.get("rawContent") if isinstance(payload, dict) else None
        if not isinstance(raw, str):
            logger.warning("Ignoring %s without rawContent", self.request_event)
            return

        thread = Thread(target=self._convert, args=(raw,), name="readability-worker", daemon=True)
        thread.start()

    def _convert(self, raw: str) -> None:
        article = extract_article(raw)
        logger.debug("Extracted %r (%d chars)", article["title"], article["length"])
        self._channel.emit(self.response_event, {"article": article})

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()
