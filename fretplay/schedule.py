"""Scheduling of timed callbacks.

Strums and string highlights are built as explicit Schedules: lists of
callbacks with millisecond offsets. A Scheduler runs them with whatever timer
facility the host has. ManualScheduler advances a virtual clock, so timing
can be checked without waiting on the wall clock.
"""

from __future__ import annotations

import heapq
import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from threading import Lock, Timer
from typing import Callable, Iterator, List, Tuple, override

from fretplay.base import Closeable

type Action = Callable[[], None]


@dataclass(frozen=True)
class TimedEvent:
    """A callback to run at an offset from the time it is submitted."""

    offset_millis: int
    action: Action


@dataclass
class Schedule:
    """An ordered list of timed events."""

    events: List[TimedEvent] = field(default_factory=list)

    def add(self, offset_millis: int, action: Action) -> None:
        if offset_millis < 0:
            raise ValueError(f"Negative offset: {offset_millis}")
        self.events.append(TimedEvent(offset_millis, action))

    def offsets(self) -> List[int]:
        return [ev.offset_millis for ev in self.events]

    def __iter__(self) -> Iterator[TimedEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)


class Scheduler(metaclass=ABCMeta):
    """Runs schedules relative to the moment they are submitted."""

    @abstractmethod
    def submit(self, schedule: Schedule) -> None:
        """Queue every event of a schedule.

        Events with zero offset may run before this returns.

        Args:
            schedule: The events to run.
        """
        raise NotImplementedError()


class ManualScheduler(Scheduler):
    """A scheduler driven by an explicit virtual clock.

    Events run only when the clock is advanced past their due time, in time
    order, with ties broken by submission order.
    """

    def __init__(self) -> None:
        self._now = 0
        self._seq = 0
        self._queue: List[Tuple[int, int, Action]] = []

    @property
    def now(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now

    @override
    def submit(self, schedule: Schedule) -> None:
        for ev in schedule:
            due = self._now + ev.offset_millis
            heapq.heappush(self._queue, (due, self._seq, ev.action))
            self._seq += 1

    def pending(self) -> List[int]:
        """Due times of the events that have not run yet, in order."""
        return sorted(due for due, _, _ in self._queue)

    def advance(self, millis: int) -> int:
        """Move the clock forward and run everything that became due.

        Events submitted by running callbacks are also run if they fall due
        within the advanced window.

        Args:
            millis: How far to move the clock.

        Returns:
            The number of callbacks run.
        """
        target = self._now + millis
        count = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, action = heapq.heappop(self._queue)
            self._now = due
            action()
            count += 1
        self._now = target
        return count

    def run_all(self) -> int:
        """Advance until nothing is pending."""
        count = 0
        while self._queue:
            count += self.advance(self._queue[0][0] - self._now)
        return count


class ThreadScheduler(Scheduler, Closeable):
    """A scheduler that runs each event on a threading.Timer.

    Events with zero offset run synchronously in submit. Timers are only
    cancelled when the scheduler is closed at shutdown, and a timer that has
    already fired skips its action once the scheduler is closed.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._timers: List[Timer] = []
        self._closed = False

    @override
    def submit(self, schedule: Schedule) -> None:
        for ev in schedule:
            if ev.offset_millis == 0:
                ev.action()
            else:
                timer = Timer(ev.offset_millis / 1000.0, self._run, args=(ev.action,))
                timer.daemon = True
                with self._lock:
                    if self._closed:
                        return
                    self._timers = [t for t in self._timers if t.is_alive()]
                    self._timers.append(timer)
                timer.start()

    def _run(self, action: Action) -> None:
        if self._closed:
            return
        try:
            action()
        except Exception:
            logging.exception("scheduled action failed")

    def close(self) -> None:
        with self._lock:
            self._closed = True
            timers = self._timers
            self._timers = []
        for timer in timers:
            timer.cancel()
