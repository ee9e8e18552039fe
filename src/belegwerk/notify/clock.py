#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


"""Delayed task queue driven by an injectable clock."""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...


class MonotonicClock:
    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Virtual clock for tests; time only moves when advanced."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("seconds must be zero or positive")
        self._now += seconds


@dataclass(eq=False)
class TaskHandle:
    task_id: int
    due: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False


class DelayedTaskQueue:
    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or MonotonicClock()
        self._heap: list[tuple[float, int, TaskHandle]] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def now(self) -> float:
        return self._clock.now()

    def schedule(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        if delay < 0:
            raise ValueError("delay must be zero or positive")
        with self._lock:
            task_id = next(self._ids)
            handle = TaskHandle(task_id=task_id, due=self._clock.now() + delay, callback=callback)
            heapq.heappush(self._heap, (handle.due, task_id, handle))
        return handle

    def cancel(self, handle: TaskHandle) -> bool:
        with self._lock:
            if handle.cancelled:
                return False
            handle.cancelled = True
            return True

    def pending(self) -> int:
        with self._lock:
            return sum(1 for _, _, handle in self._heap if not handle.cancelled)

    def next_due(self) -> float | None:
        with self._lock:
            self._drop_cancelled()
            if not self._heap:
                return None
            return self._heap[0][0]

    def run_due(self) -> int:
        """Run every task whose due time has passed; return how many ran.

        Callbacks run outside the lock so they may schedule or cancel tasks.
        """
        ran = 0
        while True:
            with self._lock:
                self._drop_cancelled()
                if not self._heap or self._heap[0][0] > self._clock.now():
                    return ran
                _, _, handle = heapq.heappop(self._heap)
                handle.cancelled = True
            handle.callback()
            ran += 1

    def advance(self, seconds: float) -> int:
        advance = getattr(self._clock, "advance", None)
        if advance is None:
            raise TypeError("advance() requires a manual clock")
        advance(seconds)
        return self.run_due()

    def serve(self, stop_event: threading.Event, poll_seconds: float = 1.0) -> None:
        while not stop_event.is_set():
            self.run_due()
            stop_event.wait(poll_seconds)

    def _drop_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)
