"""Single-threaded FIFO of deferred style passes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Deque, Optional

from markdown_engine.runtime import telemetry


@dataclass(slots=True)
class PendingPass:
    buffer_name: str
    label: str
    callback: Callable[[], None]
    sequence: int = field(default=0)


class PassScheduler:
    """Queues passes and runs them strictly in the order they were scheduled.

    Cancellation happens here, by dropping passes that have not started;
    a pass that is running always completes.
    """

    def __init__(self, *, logger_name: str = "markdown_engine.engine") -> None:
        self._queue: Deque[PendingPass] = deque()
        self._sequence = count(1)
        self._draining = False
        self.logger_name = logger_name

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def draining(self) -> bool:
        return self._draining

    def schedule(
        self, buffer_name: str, callback: Callable[[], None], label: str = "pass"
    ) -> PendingPass:
        pending = PendingPass(
            buffer_name=buffer_name,
            label=label,
            callback=callback,
            sequence=next(self._sequence),
        )
        self._queue.append(pending)
        return pending

    def run_pending(self) -> int:
        """Drain the queue; returns how many passes ran.

        Passes scheduled by a running pass join the back of the queue and run
        in the same drain. Calling this from inside a pass is a no-op.
        """

        if self._draining:
            telemetry.record_event(
                "scheduler.reentrant_drain",
                level="debug",
                data={"pending": len(self._queue)},
                logger_name=self.logger_name,
            )
            return 0
        ran = 0
        self._draining = True
        try:
            while self._queue:
                pending = self._queue.popleft()
                pending.callback()
                ran += 1
        finally:
            self._draining = False
        return ran

    def drop_pending(self, buffer_name: Optional[str] = None) -> int:
        """Forget passes that have not started, for one buffer or all of them."""

        before = len(self._queue)
        if buffer_name is None:
            self._queue.clear()
        else:
            self._queue = deque(
                pending
                for pending in self._queue
                if pending.buffer_name != buffer_name
            )
        dropped = before - len(self._queue)
        if dropped:
            telemetry.record_event(
                "scheduler.dropped",
                level="debug",
                data={"buffer": buffer_name or "*", "count": dropped},
                logger_name=self.logger_name,
            )
        return dropped


__all__ = ["PassScheduler", "PendingPass"]
