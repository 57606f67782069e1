"""Authentication module for pocket-kindle.

Provides the login state machine and the session facade.

Usage:
    from pocket_kindle.auth import SessionManager

    manager = SessionManager.from_settings(settings, pocket_client)
    if not manager.is_logged_in():
        start = await manager.start_login()
        token = await manager.await_login()
"""

from .login import LoginSession, LoginStart, LoginState
from .manager import SessionManager

__all__ = [
    "LoginSession",
    "LoginStart",
    "LoginState",
    "SessionManager",
]
