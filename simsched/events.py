from __future__ import annotations

import heapq
from typing import List, Optional

from .models import Event, EventType, Process


class EventQueue:
    """
    Pending simulation events ordered by timestamp.

    Events with equal timestamps come out in the order they were scheduled.
    Cancelled events stay in the heap and are skipped when popped.
    """

    def __init__(self) -> None:
        self._heap: List[Event] = []
        self._seq = 0
        self._live = 0

    def schedule(self, time: float, type: EventType, process: Process) -> Event:
        event = Event(time=time, seq=self._seq, type=type, process=process)
        self._seq += 1
        heapq.heappush(self._heap, event)
        self._live += 1
        return event

    def cancel(self, event: Event) -> None:
        if not event.cancelled:
            event.cancelled = True
            self._live -= 1

    def pop(self) -> Optional[Event]:
        self._discard_cancelled()
        if not self._heap:
            return None
        self._live -= 1
        return heapq.heappop(self._heap)

    def peek_time(self) -> Optional[float]:
        self._discard_cancelled()
        return self._heap[0].time if self._heap else None

    def _discard_cancelled(self) -> None:
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)

    def __len__(self) -> int:
        return self._live
