"""Pocket OAuth module.

Provides the pieces of the three-legged Pocket authorization flow.

Usage:
    from pocket_kindle.oauth import PocketClient, CallbackListener, TokenStore

    store = TokenStore("~/.pocket-kindle/.pocket-repository-state")
    store.load()

    async with PocketClient(consumer_key) as pocket:
        listener = CallbackListener(port=8080)
        listener.bind()
        code = await pocket.request_code(listener.redirect_uri)
        print(build_authorization_url(code, listener.redirect_uri))

        await listener.wait_in_background()
        store.set(await pocket.exchange_code(code))
"""

from .client import PocketClient, build_authorization_url, SENT_TAG
from .server import CallbackListener, CallbackResult, ListenerState
from .storage import TokenStore, PersistedSession

__all__ = [
    "PocketClient",
    "build_authorization_url",
    "SENT_TAG",
    "CallbackListener",
    "CallbackResult",
    "ListenerState",
    "TokenStore",
    "PersistedSession",
]
