"""
Direct Connection-Info Strategy

When we joined the group as a client, the source is the group owner and
the P2P stack already knows its address; no polling is needed.
"""

import logging
from typing import Optional

from ..listener import DiscoveredDevice
from ..p2p.manager import P2PManager
from ..p2p.models import ConnectionInfo

logger = logging.getLogger(__name__)


class DirectConnectionInfoStrategy:
    """Reads the group owner's address from connection info."""

    def __init__(self, p2p: P2PManager):
        self.p2p = p2p

    def evaluate(self, info: Optional[ConnectionInfo],
                 control_port: int) -> Optional[DiscoveredDevice]:
        """
        Pair the group owner's address with the control port.

        Returns None (never raises) if the info is missing, the group is
        not formed, we are the owner ourselves, or no address is known.
        """
        if info is None:
            logger.debug("No connection info available")
            return None

        if not info.group_formed:
            logger.debug("Connection info reports no formed group")
            return None

        if info.is_group_owner:
            logger.warning("Connection info says we own the group; expected client role")
            return None

        if not info.group_owner_address:
            logger.debug("Connection info has no group owner address")
            return None

        return DiscoveredDevice(info.group_owner_address, control_port)

    async def resolve(self, control_port: int) -> Optional[DiscoveredDevice]:
        info = await self.p2p.request_connection_info()
        device = self.evaluate(info, control_port)
        if device is not None:
            logger.info(f"Source is group owner at {device.ip_address}:{control_port}")
        return device
