"""Event channel and request/response bridge."""

from .bridge import EVENT_REQUEST, EVENT_RESPONSE, Rendezvous, RequestResponseBridge
from .channel import EventChannel

__all__ = [
    "EVENT_REQUEST",
    "EVENT_RESPONSE",
    "EventChannel",
    "Rendezvous",
    "RequestResponseBridge",
]
