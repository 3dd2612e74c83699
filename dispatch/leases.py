"""
Purpose: Short-lived per-courier assignment leases.
What it does:
While the engine is offering an order to a courier, it holds that courier's
lease. A second run that locates the same courier at the same moment fails
to acquire and moves on to its next candidate instead of racing the bind.
Leases expire on their own so a crashed run cannot pin a courier forever.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Callable, ContextManager, Dict, Iterator, Optional, Protocol, Tuple


class LeaseManager(Protocol):
    def acquire(self, courier_id: str, holder: str, ttl_seconds: float) -> bool:
        ...

    def release(self, courier_id: str, holder: str) -> None:
        ...

    def lease(self, courier_id: str, holder: str, ttl_seconds: float) -> ContextManager[bool]:
        ...


class CourierLeaseManager:
    """
    In-process lease table. Swap for a shared store (e.g. a cache with
    set-if-absent + expiry) when several worker processes dispatch at once.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._leases: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def acquire(self, courier_id: str, holder: str, ttl_seconds: float) -> bool:
        now = self._clock()
        with self._lock:
            current = self._leases.get(courier_id)
            if current is not None:
                current_holder, expires_at = current
                if expires_at > now and current_holder != holder:
                    return False
            self._leases[courier_id] = (holder, now + ttl_seconds)
            return True

    def release(self, courier_id: str, holder: str) -> None:
        with self._lock:
            current = self._leases.get(courier_id)
            if current is not None and current[0] == holder:
                del self._leases[courier_id]

    def holder_of(self, courier_id: str) -> Optional[str]:
        now = self._clock()
        with self._lock:
            current = self._leases.get(courier_id)
            if current is None or current[1] <= now:
                return None
            return current[0]

    @contextmanager
    def lease(self, courier_id: str, holder: str, ttl_seconds: float) -> Iterator[bool]:
        """
        Yields whether the lease was acquired; releases on exit if it was.
        """
        acquired = self.acquire(courier_id, holder, ttl_seconds)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(courier_id, holder)
