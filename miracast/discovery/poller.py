"""
Retry-Bounded ARP Poller

Design Decision: Polling schedule
=================================

Options Considered:
1. Fixed delay (sleep interval after each lookup)
   - Drifts when lookups are slow
2. Fixed rate (tick n due at initial_delay + n * interval)
   - Predictable worst-case latency

Decision: Fixed rate on an asyncio task
- Worst case: initial_delay + max_retries * interval (~60s by default)
- At most max_retries + 1 lookups per session
- Cancelling the task stops the next tick; a lookup already in flight
  may finish, but its result is discarded

Only one DiscoverySession is active per poller. Starting a new one
cancels the previous session first.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..listener import DiscoveredDevice
from ..p2p.wfd import DEFAULT_CONTROL_PORT
from .arp import AddressResolver

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0  # seconds
INITIAL_DELAY = 0.01  # seconds
MAX_RETRIES = 60


class SessionStatus(Enum):
    PENDING = 'pending'
    RESOLVED = 'resolved'
    EXHAUSTED = 'exhausted'
    CANCELLED = 'cancelled'


class DiscoverySession:
    """
    State of one address resolution attempt on a group interface.

    Created by RetryBoundedPoller.start(); await result() for the outcome.
    """

    def __init__(self, interface: str, control_port: int,
                 interval: float = POLL_INTERVAL,
                 initial_delay: float = INITIAL_DELAY,
                 max_retries: int = MAX_RETRIES):
        self.interface = interface
        self._control_port = control_port
        self.interval = interval
        self.initial_delay = initial_delay
        self.max_retries = max_retries

        self.retry_count = 0
        self.lookups = 0
        self.status = SessionStatus.PENDING
        self.device: Optional[DiscoveredDevice] = None

        self._task: Optional[asyncio.Task] = None

    @property
    def control_port(self) -> int:
        return self._control_port

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.PENDING

    def cancel(self):
        """Stop polling. No tick runs after this returns."""
        if not self.is_active:
            return
        self.status = SessionStatus.CANCELLED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug(f"Discovery on {self.interface} cancelled")

    async def result(self) -> Optional[DiscoveredDevice]:
        """
        Wait for the session to end.

        Returns:
            The discovered device, or None if exhausted or cancelled
        """
        if self._task is not None:
            await asyncio.wait({self._task})
        return self.device

    def get_stats(self) -> dict:
        return {
            'interface': self.interface,
            'control_port': self.control_port,
            'status': self.status.value,
            'lookups': self.lookups,
            'retry_count': self.retry_count,
            'max_retries': self.max_retries,
        }


class RetryBoundedPoller:
    """Drives an AddressResolver on a fixed schedule with a retry cap."""

    def __init__(self, resolver: AddressResolver,
                 interval: float = POLL_INTERVAL,
                 initial_delay: float = INITIAL_DELAY,
                 max_retries: int = MAX_RETRIES):
        """
        Initialize the poller.

        Args:
            resolver: ARP table resolver queried on every tick
            interval: Seconds between ticks
            initial_delay: Seconds before the first tick
            max_retries: Empty lookups tolerated before giving up
        """
        self.resolver = resolver
        self.interval = interval
        self.initial_delay = initial_delay
        self.max_retries = max_retries

        self._active: Optional[DiscoverySession] = None

    @property
    def active_session(self) -> Optional[DiscoverySession]:
        if self._active is not None and self._active.is_active:
            return self._active
        return None

    def start(self, interface: str,
              control_port: int = DEFAULT_CONTROL_PORT) -> DiscoverySession:
        """
        Start polling for a peer on the given interface.

        Must be called from a running event loop. Any previous session
        is cancelled first.
        """
        self.cancel()

        session = DiscoverySession(
            interface=interface,
            control_port=control_port,
            interval=self.interval,
            initial_delay=self.initial_delay,
            max_retries=self.max_retries,
        )
        session._task = asyncio.create_task(self._poll_loop(session))
        self._active = session

        logger.info(
            f"Watching ARP table on {interface} "
            f"(every {self.interval}s, up to {self.max_retries} retries)"
        )
        return session

    def cancel(self):
        """Cancel the active session, if any."""
        if self._active is not None:
            self._active.cancel()
            self._active = None

    async def _poll_loop(self, session: DiscoverySession):
        loop = asyncio.get_running_loop()
        started = loop.time()
        tick = 0

        while session.is_active:
            due = started + session.initial_delay + tick * session.interval
            await asyncio.sleep(max(0.0, due - loop.time()))
            tick += 1

            session.lookups += 1
            try:
                source_ip = await self.resolver.lookup(session.interface)
            except Exception as e:
                logger.error(f"ARP lookup on {session.interface} failed: {e}")
                source_ip = None

            if not session.is_active:
                return

            if source_ip is not None:
                session.device = DiscoveredDevice(source_ip, session.control_port)
                session.status = SessionStatus.RESOLVED
                logger.info(
                    f"Source found at {source_ip}:{session.control_port} "
                    f"after {session.lookups} lookups"
                )
                return

            session.retry_count += 1
            logger.debug(f"retry: {session.retry_count}")

            if session.retry_count > session.max_retries:
                session.status = SessionStatus.EXHAUSTED
                logger.warning(
                    f"No source appeared on {session.interface} "
                    f"after {session.lookups} lookups, giving up"
                )
                return
