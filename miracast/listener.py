"""
Listener Interface

How a client application hears about Miracast sources. Callbacks are
always invoked on the receiver's event loop thread.
"""

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class DiscoveredDevice:
    """A Miracast source that is ready for RTSP session negotiation."""
    ip_address: str
    control_port: int

    def to_dict(self) -> dict:
        return {'ip_address': self.ip_address, 'control_port': self.control_port}


class MiracastDeviceListener:
    """
    Base listener; override the callbacks you care about.
    """

    def on_device_added(self, ip_address: str, control_port: int):
        """
        A Miracast source wants to connect.

        Args:
            ip_address: IP address of the source
            control_port: RTSP control port of the source
        """

    def on_device_removed(self, ip_address: str):
        """
        A Miracast source disconnected.

        Part of the contract, but the receiver does not fire it yet.
        """


class CallbackListener(MiracastDeviceListener):
    """Adapts plain callables to the listener interface."""

    def __init__(self, on_added: Callable[[str, int], None],
                 on_removed: Optional[Callable[[str], None]] = None):
        self._on_added = on_added
        self._on_removed = on_removed

    def on_device_added(self, ip_address: str, control_port: int):
        self._on_added(ip_address, control_port)

    def on_device_removed(self, ip_address: str):
        if self._on_removed is not None:
            self._on_removed(ip_address)
