from __future__ import annotations

import heapq
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Iterator, List, Optional

from .metrics import MetricsAccumulator
from .models import Process


class SchedulingPolicy(str, Enum):
    PSJF = "psjf"
    RR = "rr"

    @classmethod
    def parse(cls, value: "SchedulingPolicy | str") -> "SchedulingPolicy":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        aliases = {"srtf": "psjf", "round-robin": "rr", "roundrobin": "rr"}
        name = aliases.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown scheduling policy '{value}' (use psjf or rr)") from None

    @property
    def label(self) -> str:
        return "PSJF" if self is SchedulingPolicy.PSJF else "Round Robin"


class ReadyQueue(ABC):
    """
    Processes waiting for the CPU, ordered by a scheduling policy.

    The queue owns only the ordering; processes are created by the workload
    and finalized by the driving loop. Metrics for processes still waiting
    when the run is cut off are folded into ``accumulator`` by
    :meth:`reconcile_at_end`.
    """

    policy: SchedulingPolicy

    def __init__(self, accumulator: MetricsAccumulator) -> None:
        self.accumulator = accumulator

    @abstractmethod
    def insert(self, process: Process) -> None:
        """Admit a fresh or returning process."""

    @abstractmethod
    def remove_head(self) -> Optional[Process]:
        """Remove and return the next process to dispatch, or None when idle."""

    @abstractmethod
    def peek(self) -> Optional[Process]:
        """Return what remove_head would return without removing it."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    @abstractmethod
    def __iter__(self) -> Iterator[Process]:
        """Iterate over resident processes in dispatch order."""

    @abstractmethod
    def reconcile_at_end(self, final_time: float) -> None:
        """Account for processes still resident at cutoff and drain the queue."""

    def is_empty(self) -> bool:
        return len(self) == 0

    def _drain(self) -> List[Process]:
        pending = []
        while True:
            process = self.remove_head()
            if process is None:
                return pending
            pending.append(process)


@dataclass(order=True)
class _HeapItem:
    remaining: float
    seq: int
    process: Process = field(compare=False)


class PsjfReadyQueue(ReadyQueue):
    """
    Min-heap on remaining CPU time. Ties go to whichever process was inserted
    first.
    """

    policy = SchedulingPolicy.PSJF

    def __init__(self, accumulator: MetricsAccumulator) -> None:
        super().__init__(accumulator)
        self._heap: List[_HeapItem] = []
        self._seq = 0

    def insert(self, process: Process) -> None:
        heapq.heappush(self._heap, _HeapItem(process.remaining_cpu_time, self._seq, process))
        self._seq += 1

    def remove_head(self) -> Optional[Process]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap).process

    def peek(self) -> Optional[Process]:
        return self._heap[0].process if self._heap else None

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[Process]:
        return (item.process for item in sorted(self._heap))

    def reconcile_at_end(self, final_time: float) -> None:
        """
        Treat every waiting process as terminated at ``final_time``.

        A process that was preempted at least once has its whole burst counted
        as serviced here, since interrupted processes are never credited for
        partial work while they bounce in and out of the queue.
        """
        for p in self._drain():
            start_time = p.start_time if p.start_time is not None else final_time
            p.completion_time = final_time
            p.turnaround_time = p.completion_time - p.arrival_time
            p.waiting_time = (start_time - p.arrival_time) + (
                (p.completion_time - start_time) - p.burst_time
            )
            if p.is_returning:
                self.accumulator.add_serviced_time(p.burst_time)
            self.accumulator.record_termination(p)


class RoundRobinReadyQueue(ReadyQueue):
    """
    FIFO list: tail insert, head remove. Processes whose quantum expired go
    to the back of the line just like new arrivals.
    """

    policy = SchedulingPolicy.RR

    def __init__(self, accumulator: MetricsAccumulator) -> None:
        super().__init__(accumulator)
        self._queue: Deque[Process] = deque()

    def insert(self, process: Process) -> None:
        self._queue.append(process)

    def remove_head(self) -> Optional[Process]:
        return self._queue.popleft() if self._queue else None

    def peek(self) -> Optional[Process]:
        return self._queue[0] if self._queue else None

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self) -> Iterator[Process]:
        return iter(list(self._queue))

    def reconcile_at_end(self, final_time: Optional[float] = None) -> None:
        """
        Credit the partial quanta given to processes that never finished.

        Once arrivals outpace service the queue backs up with processes that
        got some CPU but will not complete before cutoff; without this the
        utilization only reflects completed bursts.
        """
        for p in self._drain():
            if p.is_returning:
                self.accumulator.add_serviced_time(p.service_received)


def create_ready_queue(policy: SchedulingPolicy | str, accumulator: MetricsAccumulator) -> ReadyQueue:
    """
    Build a fresh ready queue for one run.
    """
    policy = SchedulingPolicy.parse(policy)
    if policy is SchedulingPolicy.PSJF:
        return PsjfReadyQueue(accumulator)
    return RoundRobinReadyQueue(accumulator)
