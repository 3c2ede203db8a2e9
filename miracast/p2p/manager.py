"""
P2P Info Query

The Wi-Fi Direct stack itself is out of our hands; all the receiver needs
from it are two one-shot queries. Each query completes once, possibly with
None, or never completes at all.
"""

from typing import Optional

from .models import ConnectionInfo, GroupSnapshot


class P2PManager:
    """Interface to the platform's Wi-Fi Direct group/connection queries."""

    async def request_group_info(self) -> Optional[GroupSnapshot]:
        """Return the current group, or None if no group exists."""
        raise NotImplementedError

    async def request_connection_info(self) -> Optional[ConnectionInfo]:
        """Return the current connection info, or None if unavailable."""
        raise NotImplementedError


class StaticP2PManager(P2PManager):
    """
    In-memory P2P manager.

    Platform glue (or a replayed scenario) pushes the latest group and
    connection info with update(); queries return whatever was set last.
    """

    def __init__(self, group: Optional[GroupSnapshot] = None,
                 connection: Optional[ConnectionInfo] = None):
        self._group = group
        self._connection = connection
        self.group_requests = 0
        self.connection_requests = 0

    def update(self, group: Optional[GroupSnapshot] = None,
               connection: Optional[ConnectionInfo] = None):
        """Replace the stored group and/or connection info."""
        if group is not None:
            self._group = group
        if connection is not None:
            self._connection = connection

    def clear(self):
        """Forget the group; used when the P2P link goes down."""
        self._group = None
        self._connection = None

    async def request_group_info(self) -> Optional[GroupSnapshot]:
        self.group_requests += 1
        return self._group

    async def request_connection_info(self) -> Optional[ConnectionInfo]:
        self.connection_requests += 1
        return self._connection
