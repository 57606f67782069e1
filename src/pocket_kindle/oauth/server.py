"""One-shot local callback listener for the Pocket authorization redirect.

Binds a fixed local address, accepts the first request the user's browser
sends after approving the app, replies with a small confirmation page and
releases the address. The request code itself comes from the earlier API
response; the callback only signals that the user has returned.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from ..errors import ListenerClosed, ResourceBusy

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_REQUEST_TIMEOUT = 5.0

CLOSE_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Pocket to Kindle</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
        }
        p { color: #666; }
    </style>
</head>
<body>
    <div>
        <h1>Authorization received</h1>
        <p>Close this window and return to the app.</p>
    </div>
</body>
</html>
"""


class ListenerState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CAPTURED = "captured"
    STOPPED = "stopped"


@dataclass
class CallbackResult:
    """What the browser sent back on the redirect."""

    path: str = "/"
    params: dict[str, str] = field(default_factory=dict)
    client_address: str | None = None

    @property
    def error(self) -> str | None:
        return self.params.get("error")


class _CallbackHandler(BaseHTTPRequestHandler):
    server: "_OneShotServer"

    def setup(self):
        # A connection that never sends a request must not park the listener.
        self.timeout = self.server.request_timeout
        super().setup()

    def log_message(self, format, *args):
        logger.debug("callback %s - " + format, self.address_string(), *args)

    def log_error(self, format, *args):
        logger.warning("callback %s - " + format, self.address_string(), *args)

    def do_GET(self):
        parsed = urlparse(self.path)
        params = {key: values[0] for key, values in parse_qs(parsed.query).items()}

        self.server.capture(
            CallbackResult(
                path=parsed.path or "/",
                params=params,
                client_address=self.client_address[0],
            )
        )

        body = CLOSE_PAGE.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=UTF-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(body)


class _OneShotServer(HTTPServer):
    def __init__(
        self,
        address: tuple[str, int],
        on_capture,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        super().__init__(address, _CallbackHandler)
        self.request_timeout = request_timeout
        self.result: CallbackResult | None = None
        self._on_capture = on_capture

    def capture(self, result: CallbackResult) -> None:
        if self.result is None:
            self.result = result
            self._on_capture(result)

    def get_request(self):
        try:
            return super().get_request()
        except OSError as e:
            logger.warning("Callback listener failed to accept a connection: %s", e)
            raise

    def handle_error(self, request, client_address):
        logger.exception("Callback request from %s failed", client_address)


class CallbackListener:
    """Local listener that captures exactly one authorization redirect.

    Usage:
        listener = CallbackListener(port=8080)
        listener.bind()                      # raises ResourceBusy if taken
        future = listener.wait_in_background()
        # ... user approves in the browser ...
        result = await future

    The wait has no deadline, but each connection gets `request_timeout`
    seconds to send its request line; idle, reset or malformed connections
    are logged and the listener keeps going. `stop()` exists for process
    teardown only.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        poll_interval: float = 0.5,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout
        self.state = ListenerState.IDLE
        self._server: _OneShotServer | None = None
        self._stop_requested = threading.Event()
        self._waiting = False

    @property
    def redirect_uri(self) -> str:
        """URL the browser is redirected to after consent."""
        return f"http://{self.host}:{self.port}"

    @property
    def is_bound(self) -> bool:
        return self._server is not None

    def bind(self) -> None:
        """Claim the local address.

        Raises:
            ResourceBusy: If the address is already bound
        """
        if self.state is not ListenerState.IDLE:
            raise ResourceBusy(
                f"Callback listener is {self.state.value}; create a new listener per login.",
                details={"state": self.state.value},
            )

        try:
            self._server = _OneShotServer(
                (self.host, self.port), self._on_capture, self.request_timeout
            )
        except OSError as e:
            raise ResourceBusy(
                f"Callback address {self.host}:{self.port} is already in use: {e}",
                details={"host": self.host, "port": self.port},
            ) from e

        self._server.timeout = self.poll_interval
        # Resolves an ephemeral port request (port=0).
        self.port = self._server.server_address[1]
        self.state = ListenerState.LISTENING
        logger.info("Callback listener bound on %s", self.redirect_uri)

    def _on_capture(self, result: CallbackResult) -> None:
        self.state = ListenerState.CAPTURED
        logger.info("Callback received on %s from %s", result.path, result.client_address)

    def wait(self) -> CallbackResult:
        """Block until the first callback is handled, then release the address.

        Raises:
            ListenerClosed: If stop() was called before a callback arrived
        """
        if self.state is ListenerState.IDLE:
            self.bind()

        server = self._server
        if server is None:
            raise ListenerClosed()

        self._waiting = True
        try:
            while server.result is None:
                if self._stop_requested.is_set():
                    raise ListenerClosed()
                server.handle_request()
        finally:
            self._waiting = False
            self._close()

        return server.result

    def wait_in_background(self) -> asyncio.Future[CallbackResult]:
        """Run wait() on a daemon thread and expose completion as a future.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[CallbackResult] = loop.create_future()

        def _settle(result: CallbackResult | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        def _run() -> None:
            try:
                result = self.wait()
            except Exception as e:
                outcome = (None, e)
            else:
                outcome = (result, None)

            try:
                loop.call_soon_threadsafe(_settle, *outcome)
            except RuntimeError:
                logger.warning("Event loop closed before the callback result was delivered")

        thread = threading.Thread(target=_run, name="pocket-callback-listener", daemon=True)
        thread.start()
        return future

    def stop(self) -> None:
        """Ask a parked wait() to give up and release the address."""
        self._stop_requested.set()
        if self._waiting:
            # wait() polls the stop flag every poll_interval and closes itself.
            return
        self._close()

    def _close(self) -> None:
        server, self._server = self._server, None
        if server is not None:
            server.server_close()
            logger.info("Callback listener on %s:%s stopped", self.host, self.port)
        if self.state is not ListenerState.CAPTURED:
            self.state = ListenerState.STOPPED
