"""
Discovery Module - Finding the Miracast Source

Provides the two ways to learn the source's address after group formation:
- ARP table polling (we are group owner)
- Connection info (we are a client)
"""

from .arp import AddressResolver, ArpEntry, parse_arp_table
from .poller import DiscoverySession, RetryBoundedPoller, SessionStatus
from .direct import DirectConnectionInfoStrategy
from .resolver import GroupRoleResolver

__all__ = [
    'AddressResolver',
    'ArpEntry',
    'parse_arp_table',
    'DiscoverySession',
    'RetryBoundedPoller',
    'SessionStatus',
    'DirectConnectionInfoStrategy',
    'GroupRoleResolver',
]
