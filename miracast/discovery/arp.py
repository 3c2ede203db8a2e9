"""
ARP Table Address Resolver

Design Decision: Finding the client's IP as group owner
=======================================================

Options Considered:
1. Run a DHCP server hook and watch leases
   - Needs control over the DHCP server
   - Not portable across P2P stacks

2. Ask the P2P stack for the client's IP
   - No such query exists on the owner side

3. Watch the kernel ARP table for the P2P interface
   - The source sends traffic to us as soon as it has an address
   - /proc/net/arp is readable without privileges on Linux

Decision: Poll /proc/net/arp
- Scope rows to the P2P group interface (e.g. p2p-wlan0-0)
- Only complete entries count (ATF_COM set, non-zero MAC)
- Reading the table is cheap; one read per poll tick

/proc/net/arp format:
    IP address       HW type     Flags       HW address            Mask     Device
    192.168.49.5     0x1         0x2         aa:bb:cc:dd:ee:ff     *        p2p-wlan0-0
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import List, Optional

import aiofiles

logger = logging.getLogger(__name__)

ARP_TABLE_PATH = '/proc/net/arp'

# Completed entry flag from <net/if_arp.h>
ATF_COM = 0x02
EMPTY_MAC = '00:00:00:00:00:00'


@dataclass
class ArpEntry:
    """One row of the ARP table."""
    ip: str
    hw_type: int
    flags: int
    mac: str
    mask: str
    device: str

    @property
    def is_complete(self) -> bool:
        return bool(self.flags & ATF_COM) and self.mac != EMPTY_MAC


def parse_arp_table(text: str) -> List[ArpEntry]:
    """
    Parse the contents of /proc/net/arp.

    Malformed rows are skipped; the header line is ignored.
    """
    entries = []

    for line in text.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 6:
            continue

        try:
            ip = str(ipaddress.IPv4Address(fields[0]))
            hw_type = int(fields[1], 16)
            flags = int(fields[2], 16)
        except ValueError:
            logger.debug(f"Skipping malformed ARP row: {line!r}")
            continue

        entries.append(ArpEntry(
            ip=ip,
            hw_type=hw_type,
            flags=flags,
            mac=fields[3].lower(),
            mask=fields[4],
            device=fields[5],
        ))

    return entries


class AddressResolver:
    """
    Looks up the peer IP bound to a network interface in the ARP table.

    lookup() never raises; safe to call from the poller on every tick.
    """

    def __init__(self, arp_table_path: str = ARP_TABLE_PATH):
        self.arp_table_path = arp_table_path

    async def entries(self, interface: Optional[str] = None) -> List[ArpEntry]:
        """
        Read and parse the ARP table.

        Args:
            interface: Only return rows for this device

        Raises:
            OSError: If the table cannot be read
        """
        async with aiofiles.open(self.arp_table_path, 'r') as f:
            text = await f.read()

        entries = parse_arp_table(text)
        if interface is not None:
            entries = [e for e in entries if e.device == interface]
        return entries

    async def lookup(self, interface: str) -> Optional[str]:
        """
        Return the IP of the first complete entry on the interface.

        Returns:
            IPv4 address string, or None if no entry is available yet
        """
        if not interface:
            return None

        try:
            entries = await self.entries(interface)
        except (OSError, ValueError) as e:
            logger.debug(f"ARP table read failed ({self.arp_table_path}): {e}")
            return None

        for entry in entries:
            if entry.is_complete:
                return entry.ip

        return None
