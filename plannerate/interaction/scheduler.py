"""Cancellable timers.

The controller only needs ``call_later(delay, callback)`` returning a handle
with ``cancel()``. An asyncio event loop already satisfies that. For UI loops
without one, PollingScheduler keeps the timers and runs due callbacks from
``run_due()``, which the loop calls on its own thread, so callbacks never
race with pointer events.
"""
from dataclasses import dataclass, field
from typing import Callable, List
import itertools
import time


@dataclass(order=True)
class ScheduledCall:
    deadline: float
    sequence: int
    callback: Callable[[], object] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self):
        self.cancelled = True


class PollingScheduler:
    """Timers driven by the caller's event loop"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._calls: List[ScheduledCall] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], object]) -> ScheduledCall:
        call = ScheduledCall(self.clock() + delay, next(self._sequence), callback)
        self._calls.append(call)
        return call

    @property
    def pending(self) -> List[ScheduledCall]:
        return sorted(c for c in self._calls if not c.cancelled)

    def run_due(self) -> int:
        """Run every callback whose deadline has passed; returns how many ran"""
        now = self.clock()
        due = [c for c in self.pending if c.deadline <= now]
        self._calls = [c for c in self._calls if not c.cancelled and c.deadline > now]
        ran = 0
        for call in due:
            # An earlier callback may have cancelled this one
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        return ran
