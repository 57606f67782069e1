"""Named-event channel between the app core and its foreground consumers."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventChannel:
    """Instance-owned publish/subscribe channel keyed by event name.

    Handlers run synchronously on the emitting thread; a handler that wants
    to do slow work hands it to its own thread. Handler exceptions are
    logged and never reach the emitter.

    Usage:
        channel = EventChannel()
        unlisten = channel.listen("readability-response", handle_reply)
        channel.emit("readability-request", {"rawContent": html})
        unlisten()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def listen(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register a handler; returns a callable that removes it."""
        with self._lock:
            self._handlers[event].append(handler)

        def _unlisten() -> None:
            with self._lock:
                handlers = self._handlers.get(event, [])
                if handler in handlers:
                    handlers.remove(handler)

        return _unlisten

    def emit(self, event: str, payload: Any = None) -> int:
        """Deliver a payload to every handler of `event`; returns how many ran."""
        with self._lock:
            handlers = list(self._handlers.get(event, ()))

        if not handlers:
            logger.warning("No listener registered for event %s", event)

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Listener for event %s failed", event)

        return len(handlers)

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, ()))
