"""Tick schedulers used by the async store operations.

A scheduler runs each callback exactly once, at the next processing step,
in the order the callbacks were submitted. Callbacks must run on the thread
that owns the event loop awaiting their results.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import Protocol, runtime_checkable

_logger = logging.getLogger(__name__)


@runtime_checkable
class TickScheduler(Protocol):
    def run_next(self, callback: Callable[[], None]) -> None:
        """Run *callback* once at the next processing step."""
        ...


class LoopTickScheduler:
    """Schedule callbacks on the running asyncio loop.

    ``loop.call_soon`` is FIFO and fires on the next loop iteration, so two
    submissions run in submission order, each in its own slot.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def run_next(self, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_soon(callback)


class TaskQueue:
    """Single-threaded FIFO queue for hosts that drive their own ticks.

    Usage::

        queue = TaskQueue()
        store = ChunkedKeyValueStore("scores", substrate, scheduler=queue)
        ...
        queue.tick()  # once per host processing step
    """

    def __init__(self) -> None:
        self._pending: deque[Callable[[], None]] = deque()
        self._ticks = 0

    def run_next(self, callback: Callable[[], None]) -> None:
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def ticks(self) -> int:
        """Number of ticks processed so far."""
        return self._ticks

    def tick(self) -> int:
        """Run the callbacks queued before this tick started.

        Callbacks queued while the tick runs wait for the next tick.
        Returns the number of callbacks run.
        """
        self._ticks += 1
        batch = len(self._pending)
        for _ in range(batch):
            callback = self._pending.popleft()
            callback()
        if batch:
            _logger.debug("Tick %d ran %d callbacks", self._ticks, batch)
        return batch

    def drain(self, *, max_ticks: int = 1000) -> int:
        """Tick until the queue is empty; return the number of callbacks run."""
        ran = 0
        for _ in range(max_ticks):
            if not self._pending:
                break
            ran += self.tick()
        return ran
