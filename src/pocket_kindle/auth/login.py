"""Three-legged Pocket login state machine.

`start_login` never blocks on the user: it obtains a request code, binds the
one-shot callback listener and schedules the exchange step as a background
task before returning the consent URL. `await_login` suspends the caller
until that task completes and caches the resulting token.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..errors import NoLoginInProgress
from ..interfaces import AuthorizationApi
from ..oauth.client import build_authorization_url
from ..oauth.server import CallbackListener
from ..oauth.storage import TokenStore

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    NOT_STARTED = "not_started"
    REQUESTING = "requesting"
    AWAITING_USER_CONSENT = "awaiting_user_consent"
    EXCHANGING = "exchanging"
    READY = "ready"
    FAILED = "failed"


def _failed(task: asyncio.Task) -> bool:
    if not task.done():
        return False
    return task.cancelled() or task.exception() is not None


@dataclass
class LoginStart:
    """Result of start_login."""

    auth_url: str | None = None

    @property
    def already_logged_in(self) -> bool:
        return self.auth_url is None


@dataclass
class LoginAttempt:
    """One in-flight login, from start_login until await_login consumes it."""

    request_code: str
    consent_url: str
    listener: CallbackListener
    task: asyncio.Task[str]


class LoginSession:
    """Single-flight login orchestration.

    Usage:
        session = LoginSession(api, tokens)

        start = await session.start_login()
        print(f"Visit: {start.auth_url}")

        token = await session.await_login()  # suspends until the user returns

    A second start_login while an attempt is pending joins it and returns the
    same consent URL; no second request code or listener is created.
    """

    def __init__(
        self,
        api: AuthorizationApi,
        tokens: TokenStore,
        listener_factory: Callable[[], CallbackListener] | None = None,
    ):
        self._api = api
        self._tokens = tokens
        self._listener_factory = listener_factory or CallbackListener
        self._lock = asyncio.Lock()
        self._attempt: LoginAttempt | None = None
        self.state = LoginState.NOT_STARTED
        self.last_error: Exception | None = None

    @property
    def in_flight(self) -> bool:
        return self._attempt is not None

    @property
    def consent_url(self) -> str | None:
        return self._attempt.consent_url if self._attempt else None

    async def start_login(self) -> LoginStart:
        """Begin a login, or join the one already in flight.

        Raises:
            UpstreamError: If the request code cannot be obtained
            ResourceBusy: If the callback address is taken
        """
        async with self._lock:
            if self._tokens.get() is not None:
                logger.info("start_login: already logged in")
                self.state = LoginState.READY
                return LoginStart()

            attempt = self._attempt
            if attempt is not None:
                if _failed(attempt.task):
                    logger.warning("Discarding failed login attempt")
                    self._attempt = None
                else:
                    logger.info("start_login: joining in-flight login")
                    return LoginStart(auth_url=attempt.consent_url)

            logger.info("start_login: requesting code")
            self.state = LoginState.REQUESTING
            self.last_error = None

            listener = self._listener_factory()
            try:
                listener.bind()
                code = await self._api.request_code(listener.redirect_uri)
            except Exception as e:
                listener.stop()
                self.state = LoginState.FAILED
                self.last_error = e
                raise

            consent_url = build_authorization_url(code, listener.redirect_uri)
            task = asyncio.create_task(
                self._complete(code, listener), name="pocket-login-exchange"
            )
            self._attempt = LoginAttempt(
                request_code=code,
                consent_url=consent_url,
                listener=listener,
                task=task,
            )
            self.state = LoginState.AWAITING_USER_CONSENT

        return LoginStart(auth_url=consent_url)

    async def _complete(self, code: str, listener: CallbackListener) -> str:
        """Background step: wait for the redirect, then exchange the code."""
        try:
            callback = await listener.wait_in_background()
        except asyncio.CancelledError:
            listener.stop()
            raise

        if callback.error:
            logger.warning("Callback reported error %r; exchanging anyway", callback.error)

        self.state = LoginState.EXCHANGING
        logger.info("Exchanging request code for access token")
        try:
            return await self._api.exchange_code(code)
        except Exception as e:
            self.state = LoginState.FAILED
            self.last_error = e
            logger.warning("Code exchange failed: %s", e)
            raise

    async def await_login(self) -> str:
        """Return the access token, suspending until the pending login completes.

        Raises:
            NoLoginInProgress: If start_login was never called (or its failure
                was already reported)
            UpstreamError: If the code exchange failed
        """
        token = self._tokens.get()
        if token is not None:
            return token

        async with self._lock:
            attempt = self._attempt
        if attempt is None:
            raise NoLoginInProgress()

        logger.info("Waiting for the user to approve the app")
        try:
            token = await asyncio.shield(attempt.task)
        except asyncio.CancelledError:
            if attempt.task.cancelled():
                raise NoLoginInProgress("Login attempt was cancelled.") from None
            raise
        except Exception as e:
            async with self._lock:
                if self._attempt is not attempt:
                    # Another waiter already reported this failure.
                    raise NoLoginInProgress() from e
                self._attempt = None
                self.state = LoginState.FAILED
                self.last_error = e
            logger.warning("Login failed: %s", e)
            raise

        async with self._lock:
            if self._attempt is attempt:
                self._attempt = None
                self._tokens.set(token)
                self.state = LoginState.READY
                logger.info("Login complete")

        return token

    async def reset(self) -> None:
        """Return to NOT_STARTED after logout. A pending attempt is left running."""
        async with self._lock:
            if self._attempt is None:
                self.state = LoginState.NOT_STARTED
                self.last_error = None

    async def aclose(self) -> None:
        """Tear down a pending attempt at shutdown."""
        async with self._lock:
            attempt, self._attempt = self._attempt, None

        if attempt is None or attempt.task.done():
            return

        attempt.listener.stop()
        attempt.task.cancel()
        try:
            await attempt.task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug("Pending login ended with %s during shutdown", e)
