"""
Group Role Resolver

Decides how to find the source once a group has formed:
- We are group owner: the source is a client; poll the ARP table
- We are a client: the source is the owner; read connection info

The control port comes from whichever group member advertises a source
role. Every qualifying member overwrites the port, so the last one in
the client list wins.
"""

import logging
from typing import Iterable, Optional

from ..listener import DiscoveredDevice
from ..p2p.manager import P2PManager
from ..p2p.models import GroupSnapshot, PeerDescriptor
from ..p2p.wfd import DEFAULT_CONTROL_PORT, PeerCapabilityFilter
from .direct import DirectConnectionInfoStrategy
from .poller import RetryBoundedPoller

logger = logging.getLogger(__name__)


class GroupRoleResolver:
    """Branches on the local group role and runs the matching strategy."""

    def __init__(self, p2p: P2PManager, poller: RetryBoundedPoller,
                 capability_filter: Optional[PeerCapabilityFilter] = None,
                 default_control_port: int = DEFAULT_CONTROL_PORT):
        """
        Args:
            p2p: Source of connection info for the client branch
            poller: ARP poller for the group owner branch
            capability_filter: Decides which members are WFD sources
            default_control_port: Used when no member advertises a port
        """
        self.p2p = p2p
        self.poller = poller
        self.capability_filter = capability_filter or PeerCapabilityFilter()
        self.default_control_port = default_control_port
        self.direct = DirectConnectionInfoStrategy(p2p)

    def select_control_port(self, clients: Iterable[PeerDescriptor]) -> int:
        """Port of the last source-capable member, else the default."""
        control_port = None

        for peer in clients:
            info = self.capability_filter.source_info(peer)
            if info is None:
                continue
            control_port = info.control_port

        if control_port is None:
            control_port = self.default_control_port
        return control_port

    async def resolve(self, snapshot: Optional[GroupSnapshot]) -> Optional[DiscoveredDevice]:
        """
        Find the source for a freshly formed group.

        Returns:
            The discovered device, or None if discovery failed or was
            cancelled
        """
        if snapshot is None:
            return None

        control_port = self.select_control_port(snapshot.clients)
        logger.debug(f"Using control port {control_port} as group {snapshot.role}")

        if snapshot.is_group_owner:
            if not snapshot.interface:
                logger.warning("Group owner snapshot has no interface name, cannot watch ARP table")
                return None
            session = self.poller.start(snapshot.interface, control_port)
            return await session.result()

        return await self.direct.resolve(control_port)

    def cancel(self):
        """Stop any ARP polling in progress."""
        self.poller.cancel()
