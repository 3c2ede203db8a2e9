"""
Connectivity Events

The platform delivers four kinds of Wi-Fi Direct notifications. Only
"connection changed" drives the receiver today; the others are accepted
so the subscription matches what the platform broadcasts.

EventDispatcher is a minimal in-process stand-in for the platform's
broadcast mechanism. Handlers run synchronously on whichever thread calls
dispatch(), so subscribers must not block.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Union

from .utils import to_bool

logger = logging.getLogger(__name__)


class EventKind(Enum):
    STATE_CHANGED = 'state_changed'
    PEERS_CHANGED = 'peers_changed'
    CONNECTION_CHANGED = 'connection_changed'
    THIS_DEVICE_CHANGED = 'this_device_changed'


@dataclass(frozen=True)
class ConnectivityEvent:
    """A single notification from the P2P stack."""
    kind: EventKind
    is_connected: bool = False

    @classmethod
    def state_changed(cls) -> 'ConnectivityEvent':
        return cls(EventKind.STATE_CHANGED)

    @classmethod
    def peers_changed(cls) -> 'ConnectivityEvent':
        return cls(EventKind.PEERS_CHANGED)

    @classmethod
    def connection_changed(cls, connected: bool) -> 'ConnectivityEvent':
        return cls(EventKind.CONNECTION_CHANGED, is_connected=connected)

    @classmethod
    def this_device_changed(cls) -> 'ConnectivityEvent':
        return cls(EventKind.THIS_DEVICE_CHANGED)

    @classmethod
    def from_dict(cls, data: Union[dict, str]) -> 'ConnectivityEvent':
        """
        Build an event from a scenario entry.

        Accepts either a bare kind name ("peers_changed") or a dict such as
        {"kind": "connection_changed", "connected": true}.
        """
        if isinstance(data, str):
            data = {'kind': data}
        elif not isinstance(data, dict):
            raise ValueError(f"Unknown event: {data!r}")
        try:
            kind = EventKind(data['kind'])
        except (KeyError, ValueError):
            raise ValueError(f"Unknown event: {data!r}")
        return cls(kind, is_connected=to_bool(data.get('connected')))


EventHandler = Callable[[ConnectivityEvent], None]


class EventDispatcher:
    """Routes events to the handlers subscribed to their kind."""

    def __init__(self):
        self._handlers: Dict[EventKind, List[EventHandler]] = {
            kind: [] for kind in EventKind
        }
        self._lock = threading.Lock()

    def subscribe(self, kind: EventKind, handler: EventHandler):
        with self._lock:
            if handler not in self._handlers[kind]:
                self._handlers[kind].append(handler)

    def unsubscribe(self, kind: EventKind, handler: EventHandler):
        with self._lock:
            if handler in self._handlers[kind]:
                self._handlers[kind].remove(handler)

    def subscriber_count(self, kind: EventKind) -> int:
        with self._lock:
            return len(self._handlers[kind])

    def dispatch(self, event: ConnectivityEvent) -> int:
        """
        Deliver an event to every subscriber of its kind.

        Returns:
            Number of handlers the event was delivered to
        """
        with self._lock:
            handlers = list(self._handlers[event.kind])

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event.kind.value}: {e}")

        return len(handlers)
