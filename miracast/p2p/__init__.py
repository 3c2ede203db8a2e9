"""
P2P Module - Wi-Fi Direct Group Model

Group/peer metadata, the info query interface, and Wi-Fi Display
capability filtering.
"""

from .wfd import (
    DEFAULT_CONTROL_PORT,
    SOURCE_ROLES,
    PeerCapabilityFilter,
    WfdDeviceType,
    WfdInfo,
    WfdParseError,
    parse_wfd_dev_info,
    parse_wfd_subelements,
    read_wfd_info,
)
from .models import ConnectionInfo, GroupSnapshot, PeerDescriptor
from .manager import P2PManager, StaticP2PManager

__all__ = [
    'DEFAULT_CONTROL_PORT',
    'SOURCE_ROLES',
    'PeerCapabilityFilter',
    'WfdDeviceType',
    'WfdInfo',
    'WfdParseError',
    'parse_wfd_dev_info',
    'parse_wfd_subelements',
    'read_wfd_info',
    'ConnectionInfo',
    'GroupSnapshot',
    'PeerDescriptor',
    'P2PManager',
    'StaticP2PManager',
]
