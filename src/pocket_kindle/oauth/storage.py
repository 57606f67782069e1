"""Access token storage.

Keeps the current Pocket access token in memory and persists it to a
single JSON state file (`{"accessToken": "..."}`) with restrictive file
permissions.

Note: the token is stored in plaintext and protected by file permissions
(0o600) only.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..errors import DeserializationError, NotLoggedIn, StorageError

logger = logging.getLogger(__name__)


@dataclass
class PersistedSession:
    """On-disk form of the session."""

    access_token: str

    def to_dict(self) -> dict[str, Any]:
        return {"accessToken": self.access_token}

    @classmethod
    def from_dict(cls, data: Any) -> "PersistedSession":
        if not isinstance(data, dict):
            raise DeserializationError("Session state must be a JSON object.")
        token = data.get("accessToken")
        if not isinstance(token, str) or not token:
            raise DeserializationError(
                "Session state is missing accessToken.",
                details={"keys": sorted(data.keys())},
            )
        return cls(access_token=token)


def mask_token(token: str | None) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return f"{token[:4]}...({len(token)} chars)"


class TokenStore:
    """In-memory access token plus its persisted copy.

    Usage:
        store = TokenStore(state_file)
        store.load()              # no-op when the file is missing
        store.set("token")
        store.save()              # write-after-use
        store.clear()             # logout
    """

    def __init__(self, state_file: Path | str):
        self.state_file = Path(state_file).expanduser()
        self._lock = threading.Lock()
        self._access_token: str | None = None

    def get(self) -> str | None:
        """Return the cached token without touching disk."""
        with self._lock:
            return self._access_token

    def set(self, token: str) -> None:
        with self._lock:
            self._access_token = token

    def load(self) -> None:
        """Populate the cached token from the state file, if present.

        Raises:
            DeserializationError: If the file exists but is malformed
            StorageError: If the file cannot be read
        """
        try:
            content = self.state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No session state at %s", self.state_file)
            return
        except OSError as e:
            raise StorageError(f"Could not read session state: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DeserializationError(f"Session state is not valid JSON: {e}") from e

        session = PersistedSession.from_dict(data)
        logger.info("Loaded session state: %s", mask_token(session.access_token))

        with self._lock:
            self._access_token = session.access_token

    def save(self) -> None:
        """Write the cached token to the state file.

        Raises:
            NotLoggedIn: If no token is cached
            StorageError: If the file cannot be written
        """
        with self._lock:
            token = self._access_token

        if token is None:
            raise NotLoggedIn("No access token to save.")

        logger.info("Saving session state to %s", self.state_file)
        content = json.dumps(PersistedSession(access_token=token).to_dict())

        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(self.state_file, 0o600)
        except OSError as e:
            raise StorageError(f"Could not write session state: {e}") from e

    def clear(self) -> None:
        """Delete the state file and forget the cached token.

        Raises:
            NotLoggedIn: If there was no state file to delete
            StorageError: If the file cannot be removed
        """
        with self._lock:
            self._access_token = None

        try:
            self.state_file.unlink()
        except FileNotFoundError as e:
            raise NotLoggedIn("No persisted session to clear.") from e
        except OSError as e:
            raise StorageError(f"Could not remove session state: {e}") from e

        logger.info("Removed session state at %s", self.state_file)

    def has_persisted_state(self) -> bool:
        return self.state_file.exists()
