"""Service layer used by the command layer."""

from .pocket import PocketService
from .send_to_kindle import SendToKindleService

__all__ = [
    "PocketService",
    "SendToKindleService",
]
