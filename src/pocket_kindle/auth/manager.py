"""Session facade used by the service layer.

Combines the token store and the login state machine behind the four
operations the application needs: is_logged_in, logout, start_login and
await_login.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

from ..config import Settings
from ..errors import DeserializationError, NotLoggedIn
from ..interfaces import AuthorizationApi
from ..oauth.server import CallbackListener
from ..oauth.storage import TokenStore
from .login import LoginSession, LoginStart

logger = logging.getLogger(__name__)


class SessionManager:
    """Pocket session lifecycle.

    Handles:
    - Lazy load of the persisted session on the first status check
    - Single-flight browser login
    - Write-after-use persistence (call persist() after a successful API call)
    - Idempotent logout

    Usage:
        manager = SessionManager.from_settings(settings, pocket_client)

        if not manager.is_logged_in():
            start = await manager.start_login()
            webbrowser.open(start.auth_url)
            await manager.await_login()
    """

    def __init__(self, tokens: TokenStore, login: LoginSession):
        self.tokens = tokens
        self.login = login
        self._loaded = False

    @classmethod
    def from_settings(cls, settings: Settings, api: AuthorizationApi) -> "SessionManager":
        """Create a manager wired to the configured state file and callback address."""
        tokens = TokenStore(settings.state_file)
        login = LoginSession(
            api,
            tokens,
            listener_factory=partial(
                CallbackListener, settings.callback_host, settings.callback_port
            ),
        )
        return cls(tokens, login)

    def is_logged_in(self) -> bool:
        """Check for a usable session, reading the state file on first use.

        An unreadable state file counts as logged out.
        """
        if not self._loaded:
            try:
                self.tokens.load()
            except DeserializationError as e:
                logger.warning(
                    "Ignoring unreadable session state at %s: %s", self.tokens.state_file, e
                )
            self._loaded = True

        return self.tokens.get() is not None

    async def start_login(self) -> LoginStart:
        return await self.login.start_login()

    async def await_login(self) -> str:
        return await self.login.await_login()

    def access_token(self) -> str:
        """Return the cached token.

        Raises:
            NotLoggedIn: If no token is cached
        """
        token = self.tokens.get()
        if token is None:
            raise NotLoggedIn()
        return token

    def persist(self) -> None:
        self.tokens.save()

    async def logout(self) -> bool:
        """Forget the session. Returns False when there was nothing persisted."""
        try:
            self.tokens.clear()
        except NotLoggedIn:
            logger.info("logout: already logged out")
            removed = False
        else:
            removed = True

        await self.login.reset()
        return removed

    async def aclose(self) -> None:
        await self.login.aclose()

    def get_status(self) -> dict[str, Any]:
        """Get session status summary."""
        logged_in = self.is_logged_in()
        return {
            "state_file": str(self.tokens.state_file),
            "logged_in": logged_in,
            "persisted": self.tokens.has_persisted_state(),
            "login_state": self.login.state.value,
            "login_in_flight": self.login.in_flight,
        }
