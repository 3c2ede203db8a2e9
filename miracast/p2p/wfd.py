"""
Wi-Fi Display Capability Filtering

Design Decision: Where the WFD metadata comes from
==================================================

Options Considered:
1. Reflection on the platform's hidden peer fields
   - What the Android receiver does (WifiP2pDevice.wfdInfo)
   - Breaks whenever the hidden field or method names change

2. Parse the raw WFD subelements ourselves
   - wpa_supplicant reports them verbatim (wfd_dev_info / wfd_subelems)
   - Stable: the layout is fixed by the Wi-Fi Display standard

Decision: Narrow reader adapter + our own parser
- PeerCapabilityFilter depends only on a WfdInfoReader callable
- The default reader understands already-decoded WfdInfo and both hex forms
- A platform-specific reader may fail however it likes; the filter
  logs the failure and classifies the peer as UNKNOWN

Device Information subelement (ID 0, length 6):
    bytes 0-1  device info bitmap (bits 0-1 device type, bits 4-5 session availability)
    bytes 2-3  session management control port (RTSP)
    bytes 4-5  maximum throughput in Mbps
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, TYPE_CHECKING

from ..utils import to_bool

if TYPE_CHECKING:
    from .models import PeerDescriptor

logger = logging.getLogger(__name__)

# Default RTSP control port for Wi-Fi Display session negotiation
DEFAULT_CONTROL_PORT = 7236

SUBELEMENT_DEVICE_INFO = 0
DEVICE_INFO_LENGTH = 6

_DEVICE_TYPE_MASK = 0x0003
_SESSION_AVAILABLE_SHIFT = 4
_SESSION_AVAILABLE_MASK = 0x0003


class WfdParseError(ValueError):
    """Raised when WFD metadata cannot be decoded."""


class WfdDeviceType(IntEnum):
    """Device role advertised in the WFD device info bitmap."""
    UNKNOWN = -1
    SOURCE = 0
    PRIMARY_SINK = 1
    SECONDARY_SINK = 2
    SOURCE_OR_PRIMARY_SINK = 3


SOURCE_ROLES = frozenset({WfdDeviceType.SOURCE, WfdDeviceType.SOURCE_OR_PRIMARY_SINK})


@dataclass(frozen=True)
class WfdInfo:
    """Decoded Wi-Fi Display device information for one peer."""
    enabled: bool
    device_type: WfdDeviceType
    control_port: int
    max_throughput: int = 0
    session_available: bool = False

    @property
    def is_source(self) -> bool:
        return self.enabled and self.device_type in SOURCE_ROLES

    def to_dict(self) -> dict:
        return {
            'enabled': self.enabled,
            'device_type': self.device_type.name.lower(),
            'control_port': self.control_port,
            'max_throughput': self.max_throughput,
            'session_available': self.session_available,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WfdInfo':
        device_type = data.get('device_type', 'unknown')
        if isinstance(device_type, str):
            try:
                device_type = WfdDeviceType[device_type.upper()]
            except KeyError:
                raise WfdParseError(f"Unknown WFD device type: {device_type}")
        else:
            device_type = WfdDeviceType(device_type)

        return cls(
            enabled=to_bool(data.get('enabled'), default=True),
            device_type=device_type,
            control_port=int(data.get('control_port', DEFAULT_CONTROL_PORT)),
            max_throughput=int(data.get('max_throughput', 0)),
            session_available=to_bool(data.get('session_available')),
        )


def _hex_to_bytes(value: str) -> bytes:
    text = value.strip().lower()
    if text.startswith('0x'):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise WfdParseError(f"Invalid hex string {value!r}: {e}") from e


def _decode_device_info(body: bytes) -> WfdInfo:
    if len(body) != DEVICE_INFO_LENGTH:
        raise WfdParseError(
            f"Device info must be {DEVICE_INFO_LENGTH} bytes, got {len(body)}"
        )

    bitmap = int.from_bytes(body[0:2], 'big')
    control_port = int.from_bytes(body[2:4], 'big')
    max_throughput = int.from_bytes(body[4:6], 'big')

    availability = (bitmap >> _SESSION_AVAILABLE_SHIFT) & _SESSION_AVAILABLE_MASK

    return WfdInfo(
        enabled=True,
        device_type=WfdDeviceType(bitmap & _DEVICE_TYPE_MASK),
        control_port=control_port,
        max_throughput=max_throughput,
        session_available=availability == 1,
    )


def parse_wfd_dev_info(value: str) -> WfdInfo:
    """
    Parse the 6-byte device info body, e.g. ``0x00101c440032``.

    This is the form wpa_supplicant prints as ``wfd_dev_info=`` in
    P2P-DEVICE-FOUND events.

    Raises:
        WfdParseError: If the value is not 6 bytes of valid hex
    """
    return _decode_device_info(_hex_to_bytes(value))


def parse_wfd_subelements(value: str) -> WfdInfo:
    """
    Parse a WFD subelement list and decode its Device Information entry.

    Each subelement is encoded as ID (1 byte), length (2 bytes), body.

    Raises:
        WfdParseError: If the list is truncated or has no device info
    """
    data = _hex_to_bytes(value)
    offset = 0

    while offset < len(data):
        if offset + 3 > len(data):
            raise WfdParseError(f"Truncated subelement header at offset {offset}")

        sub_id = data[offset]
        length = int.from_bytes(data[offset + 1:offset + 3], 'big')
        body = data[offset + 3:offset + 3 + length]

        if len(body) != length:
            raise WfdParseError(
                f"Subelement {sub_id} declares {length} bytes, only {len(body)} present"
            )

        if sub_id == SUBELEMENT_DEVICE_INFO:
            return _decode_device_info(body)

        offset += 3 + length

    raise WfdParseError("No device information subelement present")


WfdInfoReader = Callable[['PeerDescriptor'], Optional[WfdInfo]]


def read_wfd_info(peer: 'PeerDescriptor') -> Optional[WfdInfo]:
    """Default reader: decoded info first, then either raw hex form."""
    if peer is None:
        return None
    if peer.wfd_info is not None:
        return peer.wfd_info
    if peer.wfd_dev_info:
        return parse_wfd_dev_info(peer.wfd_dev_info)
    if peer.wfd_subelems:
        return parse_wfd_subelements(peer.wfd_subelems)
    return None


class PeerCapabilityFilter:
    """
    Decides whether a peer advertises the Wi-Fi Display source role.

    Never raises: unreadable metadata classifies as UNKNOWN.
    """

    def __init__(self, reader: WfdInfoReader = read_wfd_info):
        """
        Args:
            reader: Adapter that extracts WfdInfo from a peer; may raise
        """
        self._reader = reader

    def inspect(self, peer: 'PeerDescriptor') -> Optional[WfdInfo]:
        """Return the peer's enabled WFD info, or None."""
        try:
            info = self._reader(peer)
        except Exception as e:
            name = getattr(peer, 'device_address', None) or repr(peer)
            logger.error(f"Could not read Wi-Fi Display info for {name}: {e}")
            return None

        if info is None or not info.enabled:
            return None
        return info

    def classify(self, peer: 'PeerDescriptor') -> WfdDeviceType:
        info = self.inspect(peer)
        if info is None:
            return WfdDeviceType.UNKNOWN
        return info.device_type

    def source_info(self, peer: 'PeerDescriptor') -> Optional[WfdInfo]:
        """Return WFD info only when the peer can act as a source."""
        info = self.inspect(peer)
        if info is None or info.device_type not in SOURCE_ROLES:
            return None
        return info

    def is_source(self, peer: 'PeerDescriptor') -> bool:
        return self.source_info(peer) is not None
