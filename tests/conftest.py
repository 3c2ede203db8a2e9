"""Shared fixtures and fakes for the receiver tests."""

import asyncio
import threading
from pathlib import Path
from typing import List, Optional

import pytest

from miracast.discovery import AddressResolver
from miracast.listener import MiracastDeviceListener
from miracast.receiver import ReceiverConfig

ARP_HEADER = "IP address       HW type     Flags       HW address            Mask     Device\n"

# bitmap 0x0010: source, session available; port 7236; 50 Mbps
SOURCE_7236 = "0x00101c440032"
# bitmap 0x0010: source, session available; port 8554; 50 Mbps
SOURCE_8554 = "0x0010216a0032"
# bitmap 0x0011: primary sink; port 9000
SINK_9000 = "0x001123280032"
# bitmap 0x0013: source or primary sink; port 7000
DUAL_7000 = "0x00131b580032"


class ScriptedResolver(AddressResolver):
    """AddressResolver that replays canned lookup results."""

    def __init__(self, results: List[Optional[str]]):
        super().__init__('/nonexistent/arp')
        self.results = list(results)
        self.calls: List[str] = []
        self.times: List[float] = []

    async def lookup(self, interface: str) -> Optional[str]:
        self.calls.append(interface)
        self.times.append(asyncio.get_running_loop().time())
        if self.results:
            return self.results.pop(0)
        return None


class RecordingListener(MiracastDeviceListener):
    """
    Records callbacks. Create it inside the running loop so the
    asyncio.Event binds to the right loop.
    """

    def __init__(self):
        self.added = []
        self.removed = []
        self.threads = []
        self.event = asyncio.Event()

    def on_device_added(self, ip_address, control_port):
        self.added.append((ip_address, control_port))
        self.threads.append(threading.get_ident())
        self.event.set()

    def on_device_removed(self, ip_address):
        self.removed.append(ip_address)


def fast_config(**overrides) -> ReceiverConfig:
    values = dict(poll_interval=0.01, initial_delay=0.0, max_retries=60)
    values.update(overrides)
    return ReceiverConfig(**values)


def arp_row(ip: str, flags: str, mac: str, device: str) -> str:
    return f"{ip:<17}0x1         {flags:<12}{mac:<22}*        {device}\n"


@pytest.fixture
def arp_table(tmp_path: Path) -> Path:
    path = tmp_path / "arp"
    path.write_text(
        ARP_HEADER
        + arp_row("192.168.1.1", "0x2", "11:22:33:44:55:66", "wlan0")
        + arp_row("192.168.49.7", "0x0", "00:00:00:00:00:00", "p2p-wlan0-0")
        + arp_row("192.168.49.5", "0x2", "aa:bb:cc:dd:ee:ff", "p2p-wlan0-0")
    )
    return path
