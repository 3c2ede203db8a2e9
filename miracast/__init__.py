"""
Miracast Source Discovery

Finds the IP address and RTSP control port of a Miracast (Wi-Fi Display)
source once a Wi-Fi Direct group has formed.
"""

from .events import ConnectivityEvent, EventDispatcher, EventKind
from .listener import CallbackListener, DiscoveredDevice, MiracastDeviceListener
from .p2p import (
    DEFAULT_CONTROL_PORT,
    ConnectionInfo,
    GroupSnapshot,
    P2PManager,
    PeerCapabilityFilter,
    PeerDescriptor,
    StaticP2PManager,
    WfdDeviceType,
    WfdInfo,
)
from .discovery import AddressResolver, GroupRoleResolver, RetryBoundedPoller
from .receiver import MiracastReceiver, ReceiverConfig, ReceiverState

__version__ = '0.1.0'

__all__ = [
    'ConnectivityEvent',
    'EventDispatcher',
    'EventKind',
    'CallbackListener',
    'DiscoveredDevice',
    'MiracastDeviceListener',
    'DEFAULT_CONTROL_PORT',
    'ConnectionInfo',
    'GroupSnapshot',
    'P2PManager',
    'PeerCapabilityFilter',
    'PeerDescriptor',
    'StaticP2PManager',
    'WfdDeviceType',
    'WfdInfo',
    'AddressResolver',
    'GroupRoleResolver',
    'RetryBoundedPoller',
    'MiracastReceiver',
    'ReceiverConfig',
    'ReceiverState',
]
