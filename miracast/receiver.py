"""
Miracast Receiver - Connection State Machine

Listens for Wi-Fi Direct connectivity events and, whenever a P2P
connection comes up, works out where the Miracast source is:

    connection changed (connected)
        -> request group info
        -> group owner?  poll the ARP table on the group interface
           group client? read the owner address from connection info
        -> listener.on_device_added(ip, control_port)

Threading:
- on_event() may be called from any thread (the platform dispatcher's)
- Everything else runs on the asyncio loop the receiver was started on,
  including listener callbacks

Registration mirrors the platform receiver lifecycle:

    receiver = MiracastReceiver(p2p, listener)
    await receiver.start()
    receiver.register(dispatcher)   # on resume
    ...
    receiver.unregister()           # on pause
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .discovery import AddressResolver, GroupRoleResolver, RetryBoundedPoller
from .discovery.arp import ARP_TABLE_PATH
from .discovery.poller import INITIAL_DELAY, MAX_RETRIES, POLL_INTERVAL
from .events import ConnectivityEvent, EventDispatcher, EventKind
from .listener import DiscoveredDevice, MiracastDeviceListener
from .p2p import DEFAULT_CONTROL_PORT, P2PManager

logger = logging.getLogger(__name__)


@dataclass
class ReceiverConfig:
    """Configuration for a Miracast receiver."""
    # ARP polling (group owner branch)
    arp_table_path: str = ARP_TABLE_PATH
    poll_interval: float = POLL_INTERVAL
    initial_delay: float = INITIAL_DELAY
    max_retries: int = MAX_RETRIES

    # Used when no group member advertises a control port
    default_control_port: int = DEFAULT_CONTROL_PORT


class ReceiverState(Enum):
    IDLE = 'idle'
    AWAITING_GROUP_INFO = 'awaiting_group_info'
    RESOLVING = 'resolving'
    RESOLVED = 'resolved'


class MiracastReceiver:
    """
    Turns P2P connectivity events into discovered Miracast sources.

    At most one resolution attempt runs at a time; a new "connected"
    event supersedes whatever attempt was in flight.
    """

    def __init__(self, p2p: P2PManager,
                 listener: Optional[MiracastDeviceListener] = None,
                 config: ReceiverConfig = None,
                 address_resolver: Optional[AddressResolver] = None):
        """
        Initialize a receiver.

        Args:
            p2p: Group/connection info queries
            listener: Notified when a source is discovered
            config: Receiver configuration (uses defaults if not provided)
            address_resolver: ARP table reader (built from config if not provided)
        """
        self.config = config or ReceiverConfig()
        self.p2p = p2p
        self.listener = listener

        self.address_resolver = address_resolver or AddressResolver(
            self.config.arp_table_path
        )
        self.poller = RetryBoundedPoller(
            self.address_resolver,
            interval=self.config.poll_interval,
            initial_delay=self.config.initial_delay,
            max_retries=self.config.max_retries,
        )
        self.resolver = GroupRoleResolver(
            p2p,
            self.poller,
            default_control_port=self.config.default_control_port,
        )

        # State
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._dispatcher: Optional[EventDispatcher] = None
        self._task: Optional[asyncio.Task] = None
        self._state = ReceiverState.IDLE
        self._last_device: Optional[DiscoveredDevice] = None
        self._devices_added = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> ReceiverState:
        return self._state

    @property
    def last_device(self) -> Optional[DiscoveredDevice]:
        return self._last_device

    async def start(self):
        """Bind the receiver to the running event loop."""
        if self._running:
            return

        self._loop = asyncio.get_running_loop()
        self._running = True
        logger.info("Miracast receiver started")

    async def stop(self):
        """Unregister and cancel any resolution in progress."""
        if not self._running:
            return

        self.unregister()
        self._running = False
        self._reset()
        logger.info("Miracast receiver stopped")

    async def join(self):
        """Wait for the current resolution attempt, if any, to finish."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    # === Dispatcher registration ===

    def register(self, dispatcher: EventDispatcher):
        """Subscribe to all four Wi-Fi Direct event kinds."""
        if self._dispatcher is not None:
            self.unregister()

        for kind in EventKind:
            dispatcher.subscribe(kind, self.on_event)
        self._dispatcher = dispatcher
        logger.debug("Registered for P2P events")

    def unregister(self):
        """Unsubscribe from the dispatcher and abandon any resolution."""
        dispatcher = self._dispatcher
        if dispatcher is None:
            return

        for kind in EventKind:
            dispatcher.unsubscribe(kind, self.on_event)
        self._dispatcher = None
        logger.debug("Unregistered from P2P events")

        self._call_on_loop(self._reset)

    # === Event intake ===

    def on_event(self, event: ConnectivityEvent):
        """
        Accept an event from any thread.

        Never blocks: the event is handed to the receiver's loop.
        """
        if not self._running:
            logger.debug(f"Receiver not running, dropping {event.kind.value}")
            return
        self._call_on_loop(self._handle_event, event)

    def _call_on_loop(self, callback, *args):
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(callback, *args)

    def _handle_event(self, event: ConnectivityEvent):
        if not self._running:
            return

        if event.kind is not EventKind.CONNECTION_CHANGED:
            logger.debug(f"P2P event: {event.kind.value}")
            return

        if event.is_connected:
            logger.info("P2P connection established, looking for source")
            self._begin_resolution()
        else:
            logger.info("P2P connection lost")
            self._reset()

    # === Resolution ===

    def _begin_resolution(self):
        self._cancel_resolution()
        self._state = ReceiverState.AWAITING_GROUP_INFO
        self._task = asyncio.create_task(self._invoke_sink())

    def _cancel_resolution(self):
        self.resolver.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _reset(self):
        self._cancel_resolution()
        self._state = ReceiverState.IDLE

    async def _invoke_sink(self):
        try:
            device = await self._find_source()
        except Exception as e:
            logger.error(f"Source discovery failed: {e}")
            device = None

        if device is None:
            self._state = ReceiverState.IDLE
            return

        self._state = ReceiverState.RESOLVED
        self._last_device = device
        self._notify_added(device)

    async def _find_source(self) -> Optional[DiscoveredDevice]:
        snapshot = await self.p2p.request_group_info()
        if snapshot is None:
            logger.debug("No group info available")
            return None

        self._state = ReceiverState.RESOLVING
        logger.info(
            f"Group on {snapshot.interface or '?'} as {snapshot.role}, "
            f"{len(snapshot.clients)} member(s)"
        )
        return await self.resolver.resolve(snapshot)

    def _notify_added(self, device: DiscoveredDevice):
        self._devices_added += 1
        logger.info(f"Miracast source: {device.ip_address}:{device.control_port}")

        if self.listener is None:
            return

        try:
            self.listener.on_device_added(device.ip_address, device.control_port)
        except Exception as e:
            logger.error(f"Listener error: {e}")

    # === Stats ===

    def get_stats(self) -> dict:
        """Get receiver statistics."""
        session = self.poller.active_session
        return {
            'running': self._running,
            'registered': self._dispatcher is not None,
            'state': self._state.value,
            'devices_added': self._devices_added,
            'last_device': self._last_device.to_dict() if self._last_device else None,
            'session': session.get_stats() if session else None,
        }
