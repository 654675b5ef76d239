"""Host loop primitives: deferred callbacks and idle-time slices.

The engine never blocks. It asks the host loop to deliver change events
soon and to run flushes when the host is idle, handing each flush a
``Deadline`` that reports how much of the time slice is left.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Deadline(Protocol):
    """Remaining budget of the current idle slice."""

    def time_remaining(self) -> float:
        """Milliseconds left in this slice."""
        ...

    @property
    def did_timeout(self) -> bool: ...


IdleCallback = Callable[[Deadline], None]


class TimeBudget:
    """Deadline measured against a monotonic clock from construction time."""

    def __init__(self, budget_ms: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.budget_ms = budget_ms
        self._clock = clock
        self._started = clock()

    def time_remaining(self) -> float:
        elapsed_ms = (self._clock() - self._started) * 1000.0
        return max(0.0, self.budget_ms - elapsed_ms)

    @property
    def did_timeout(self) -> bool:
        return self.time_remaining() <= 0.0


class UnlimitedDeadline:
    """Deadline that never runs out."""

    did_timeout = False

    def time_remaining(self) -> float:
        return math.inf


class HostLoop(Protocol):
    def call_soon(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on the next loop iteration."""
        ...

    def request_idle(self, callback: IdleCallback) -> None:
        """Run ``callback`` with a fresh ``Deadline`` once the host is idle."""
        ...


class AsyncioHostLoop:
    """Host loop on top of an asyncio event loop.

    Idle slices are approximated by a short delay followed by a fixed
    time budget.
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        budget_ms: float = 16.0,
        idle_delay: float = 0.2,
    ) -> None:
        self._loop = loop
        self.budget_ms = budget_ms
        self.idle_delay = idle_delay

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_soon(self, callback: Callable[[], None]) -> None:
        self.loop.call_soon(callback)

    def request_idle(self, callback: IdleCallback) -> None:
        self.loop.call_later(self.idle_delay, self._run_idle, callback)

    def _run_idle(self, callback: IdleCallback) -> None:
        callback(TimeBudget(self.budget_ms))


class ManualHostLoop:
    """Host loop driven explicitly by its owner.

    Callbacks queue up until ``run_until_idle()`` (or ``run_once()``) runs
    them in FIFO order. Idle callbacks receive ``deadline_factory()``, an
    unlimited deadline when ``budget_ms`` is None, or a ``TimeBudget``.
    """

    def __init__(
        self,
        budget_ms: Optional[float] = None,
        deadline_factory: Optional[Callable[[], Deadline]] = None,
    ) -> None:
        self.budget_ms = budget_ms
        self.deadline_factory = deadline_factory
        self._queue: Deque[Tuple[str, Callable]] = deque()
        self.idle_requests = 0

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def pending_idle(self) -> int:
        return sum(1 for kind, _ in self._queue if kind == "idle")

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._queue.append(("soon", callback))

    def request_idle(self, callback: IdleCallback) -> None:
        self.idle_requests += 1
        self._queue.append(("idle", callback))

    def _make_deadline(self) -> Deadline:
        if self.deadline_factory is not None:
            return self.deadline_factory()
        if self.budget_ms is None:
            return UnlimitedDeadline()
        return TimeBudget(self.budget_ms)

    def _run(self, kind: str, callback: Callable) -> None:
        if kind == "idle":
            callback(self._make_deadline())
        else:
            callback()

    def run_once(self) -> int:
        """Run the callbacks queued right now; ones they queue wait for the next call."""
        batch = list(self._queue)
        self._queue.clear()
        for kind, callback in batch:
            self._run(kind, callback)
        return len(batch)

    def run_until_idle(self, limit: Optional[int] = None) -> int:
        """Run callbacks until none are queued. Returns how many ran."""
        executed = 0
        while self._queue:
            if limit is not None and executed >= limit:
                logger.warning(f"Stopping after {executed} callbacks with {len(self._queue)} still queued")
                break
            kind, callback = self._queue.popleft()
            self._run(kind, callback)
            executed += 1
        return executed


__all__ = [
    "Deadline",
    "IdleCallback",
    "TimeBudget",
    "UnlimitedDeadline",
    "HostLoop",
    "AsyncioHostLoop",
    "ManualHostLoop",
]
