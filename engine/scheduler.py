"""engine.scheduler

Virtual millisecond clock with cancellable timed tasks.

The tick driver is a recurring task; reaction windows and follow-up delays are
one-shot tasks owned by the simulation and cancelled on early exits.
Nothing here sleeps: callers advance time explicitly (tests by fixed steps,
the UI by measured real elapsed time).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional


@dataclass
class ScheduledTask:
    """A callback due at `due_ms` on the scheduler's clock."""

    due_ms: int
    seq: int
    name: str
    callback: Callable[[], None]
    interval_ms: Optional[int] = None  # If set, reschedule after firing
    cancelled: bool = False


class TaskScheduler:
    def __init__(self) -> None:
        self.now_ms: int = 0
        self._tasks: List[ScheduledTask] = []
        self._seq: int = 0

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def call_later(self, delay_ms: int, name: str, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(
            due_ms=self.now_ms + max(0, int(delay_ms)),
            seq=self._next_seq(),
            name=name,
            callback=callback,
        )
        self._tasks.append(task)
        return task

    def call_every(self, interval_ms: int, name: str, callback: Callable[[], None]) -> ScheduledTask:
        if int(interval_ms) <= 0:
            raise ValueError("interval_ms must be > 0")
        task = ScheduledTask(
            due_ms=self.now_ms + int(interval_ms),
            seq=self._next_seq(),
            name=name,
            callback=callback,
            interval_ms=int(interval_ms),
        )
        self._tasks.append(task)
        return task

    def cancel(self, task: Optional[ScheduledTask]) -> None:
        if task is None:
            return
        task.cancelled = True
        self._tasks = [t for t in self._tasks if t is not task]

    def cancel_all(self) -> None:
        for t in self._tasks:
            t.cancelled = True
        self._tasks = []

    def pending(self) -> List[str]:
        return [t.name for t in sorted(self._tasks, key=lambda t: (t.due_ms, t.seq))]

    def advance(self, ms: int) -> List[str]:
        """Move the clock forward and fire everything that falls due, in order.

        Tasks scheduled by a callback fire in the same call if they are due
        before the target time.

        Returns:
            Names of the tasks that fired.
        """
        target = self.now_ms + max(0, int(ms))
        fired: List[str] = []
        while True:
            due = [t for t in self._tasks if not t.cancelled and t.due_ms <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due_ms, t.seq))
            self.now_ms = task.due_ms
            if task.interval_ms is not None:
                task.due_ms += task.interval_ms
                task.seq = self._next_seq()
            else:
                self._tasks.remove(task)
            task.callback()
            fired.append(task.name)
        self.now_ms = target
        return fired

    def __repr__(self) -> str:
        return f"TaskScheduler(now_ms={self.now_ms}, pending={len(self._tasks)})"
