"""
P2P Group Data Model

Read-only views over what the Wi-Fi Direct stack reports after a group
forms. The core never mutates these; a fresh snapshot is requested for
every connection.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..utils import to_bool
from .wfd import WfdInfo


@dataclass(frozen=True)
class PeerDescriptor:
    """
    A group member as reported by the P2P stack.

    WFD metadata may arrive already decoded (wfd_info) or as one of the
    raw hex forms wpa_supplicant prints (wfd_dev_info, wfd_subelems).
    """
    device_address: str = ''
    device_name: str = ''
    wfd_info: Optional[WfdInfo] = None
    wfd_dev_info: Optional[str] = None
    wfd_subelems: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'device_address': self.device_address,
            'device_name': self.device_name,
        }
        if self.wfd_info is not None:
            data['wfd_info'] = self.wfd_info.to_dict()
        if self.wfd_dev_info:
            data['wfd_dev_info'] = self.wfd_dev_info
        if self.wfd_subelems:
            data['wfd_subelems'] = self.wfd_subelems
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'PeerDescriptor':
        wfd_info = data.get('wfd_info')
        return cls(
            device_address=data.get('device_address', ''),
            device_name=data.get('device_name', ''),
            wfd_info=WfdInfo.from_dict(wfd_info) if wfd_info else None,
            wfd_dev_info=data.get('wfd_dev_info'),
            wfd_subelems=data.get('wfd_subelems'),
        )


@dataclass(frozen=True)
class GroupSnapshot:
    """Group metadata captured when the P2P connection comes up."""
    is_group_owner: bool
    interface: str = ''
    clients: Tuple[PeerDescriptor, ...] = field(default_factory=tuple)

    @property
    def role(self) -> str:
        return 'owner' if self.is_group_owner else 'client'

    def to_dict(self) -> dict:
        return {
            'is_group_owner': self.is_group_owner,
            'interface': self.interface,
            'clients': [c.to_dict() for c in self.clients],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GroupSnapshot':
        return cls(
            is_group_owner=to_bool(data.get('is_group_owner')),
            interface=data.get('interface') or '',
            clients=tuple(
                PeerDescriptor.from_dict(c) for c in data.get('clients', [])
            ),
        )


@dataclass(frozen=True)
class ConnectionInfo:
    """Connection metadata; carries the owner's address for clients."""
    group_formed: bool
    is_group_owner: bool
    group_owner_address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'group_formed': self.group_formed,
            'is_group_owner': self.is_group_owner,
            'group_owner_address': self.group_owner_address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ConnectionInfo':
        return cls(
            group_formed=to_bool(data.get('group_formed')),
            is_group_owner=to_bool(data.get('is_group_owner')),
            group_owner_address=data.get('group_owner_address'),
        )
