"""Error taxonomy shared by the session, bridge and service layers."""

from __future__ import annotations

from typing import Any


class PocketKindleError(Exception):
    """Base exception for pocket-kindle errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UpstreamError(PocketKindleError):
    """Remote API call failed or returned an unexpected shape."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class NoLoginInProgress(PocketKindleError):
    """await_login was called without a pending login attempt."""

    def __init__(self, message: str = "No login in progress. Call start_login first."):
        super().__init__(message)


class NotLoggedIn(PocketKindleError):
    """An operation requiring an access token found none."""

    def __init__(self, message: str = "Not logged in to Pocket."):
        super().__init__(message)


class ResourceBusy(PocketKindleError):
    """A singleton resource (listener address, bridge slot) is in use."""


class DeserializationError(PocketKindleError):
    """Persisted state or a bridge payload could not be decoded."""


class StorageError(PocketKindleError):
    """Filesystem failure unrelated to a missing state file."""


class BridgeClosed(PocketKindleError):
    """The request/response bridge was closed."""

    def __init__(self, message: str = "Bridge is closed."):
        super().__init__(message)


class ListenerClosed(PocketKindleError):
    """The callback listener was stopped before a callback arrived."""

    def __init__(self, message: str = "Callback listener stopped before a callback arrived."):
        super().__init__(message)


class DeliveryError(PocketKindleError):
    """Outbound mail delivery failed."""


class ConfigError(PocketKindleError):
    """Required configuration is missing."""
