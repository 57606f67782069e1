"""Request/response bridge over an EventChannel.

Publishes a request event and suspends the calling coroutine until the
consumer answers on the response event. One exchange at a time per bridge:
the pairing between a request and its reply relies on it.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import BridgeClosed, DeserializationError, ResourceBusy
from ..models import ConversionResult
from .channel import EventChannel

logger = logging.getLogger(__name__)

EVENT_REQUEST = "readability-request"
EVENT_RESPONSE = "readability-response"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class Rendezvous:
    """Single-slot hand-off from any thread to one coroutine.

    offer() never blocks: it resolves the pending waiter, or parks the value
    in the empty slot, or returns False when the slot is already full.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Any = None
        self._full = False
        self._waiter: asyncio.Future | None = None
        self._closed = False

    @property
    def full(self) -> bool:
        with self._lock:
            return self._full

    def offer(self, value: Any) -> bool:
        with self._lock:
            if self._closed:
                return False
            waiter, self._waiter = self._waiter, None
            if waiter is None:
                if self._full:
                    return False
                self._value, self._full = value, True
                return True

        try:
            waiter.get_loop().call_soon_threadsafe(self._deliver, waiter, value)
        except RuntimeError:
            logger.warning("Waiter's event loop is closed; payload discarded")
            return False
        return True

    def _deliver(self, waiter: asyncio.Future, value: Any) -> None:
        if waiter.done():
            # The waiter was cancelled while the value was in transit.
            if not self.offer(value):
                logger.warning("Dropping payload for a cancelled waiter: slot is full")
            return
        waiter.set_result(value)

    async def take(self) -> Any:
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._closed:
                raise BridgeClosed()
            if self._full:
                value, self._value, self._full = self._value, None, False
                return value
            waiter = loop.create_future()
            self._waiter = waiter

        try:
            return await waiter
        finally:
            with self._lock:
                if self._waiter is waiter:
                    self._waiter = None

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._value, self._full = None, False
            waiter, self._waiter = self._waiter, None

        if waiter is not None:
            try:
                waiter.get_loop().call_soon_threadsafe(_fail_closed, waiter)
            except RuntimeError:
                pass


def _fail_closed(waiter: asyncio.Future) -> None:
    if not waiter.done():
        waiter.set_exception(BridgeClosed())


class RequestResponseBridge(Generic[ResponseT]):
    """Delegates work to an event-driven consumer and awaits its reply.

    Usage:
        bridge = RequestResponseBridge(channel)
        result = await bridge.exchange({"rawContent": html})
        print(result.title)

    Raises ResourceBusy if exchange() is entered while another exchange on
    the same bridge is still waiting.
    """

    def __init__(
        self,
        channel: EventChannel,
        request_event: str = EVENT_REQUEST,
        response_event: str = EVENT_RESPONSE,
        response_model: type[ResponseT] = ConversionResult,
    ):
        self.request_event = request_event
        self.response_event = response_event
        self.response_model = response_model
        self._channel = channel
        self._slot = Rendezvous()
        self._busy = threading.Lock()
        self._closed = False
        self._unlisten = channel.listen(response_event, self._on_response)

    @property
    def closed(self) -> bool:
        return self._closed

    def _on_response(self, payload: Any) -> None:
        if not self._slot.offer(payload):
            logger.warning(
                "Dropping %s payload: a response is already pending", self.response_event
            )

    async def exchange(self, payload: dict[str, Any]) -> ResponseT:
        """Emit the request and wait for the correlated response.

        Raises:
            ResourceBusy: If another exchange is in flight on this bridge
            BridgeClosed: If the bridge is (or gets) closed
            DeserializationError: If the reply does not match the response model
        """
        if self._closed:
            raise BridgeClosed()

        if not self._busy.acquire(blocking=False):
            raise ResourceBusy(
                "A bridge exchange is already in flight.",
                details={"event": self.request_event},
            )

        try:
            self._channel.emit(self.request_event, payload)
            logger.info("Waiting for %s", self.response_event)
            raw = await self._slot.take()
        finally:
            self._busy.release()

        return self._decode(raw)

    def _decode(self, raw: Any) -> ResponseT:
        try:
            if isinstance(raw, (str, bytes)):
                return self.response_model.model_validate_json(raw)
            return self.response_model.model_validate(raw)
        except ValidationError as e:
            raise DeserializationError(
                f"Invalid {self.response_event} payload: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def close(self) -> None:
        """Stop listening; pending and future exchanges raise BridgeClosed."""
        if self._closed:
            return
        self._closed = True
        self._unlisten()
        self._slot.close()
