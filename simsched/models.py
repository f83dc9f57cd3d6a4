from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass
class Process:
    pid: str
    arrival_time: float
    burst_time: float
    # None only until __post_init__ fills in burst_time; always a float afterwards.
    remaining_cpu_time: Optional[float] = None
    start_time: Optional[float] = None
    completion_time: Optional[float] = None
    waiting_time: float = 0.0
    turnaround_time: float = 0.0
    # Set once the process has received service and re-enters the ready queue.
    is_returning: bool = False

    def __post_init__(self) -> None:
        if self.arrival_time < 0:
            raise ValueError(f"arrival_time cannot be negative (pid={self.pid})")
        if self.burst_time <= 0:
            raise ValueError(f"burst_time must be strictly positive (pid={self.pid})")
        if self.remaining_cpu_time is None:
            self.remaining_cpu_time = self.burst_time

    @property
    def service_received(self) -> float:
        return self.burst_time - self.remaining_cpu_time


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: float
    end_time: float


class EventType(Enum):
    ARRIVAL = "arrival"
    COMPLETION = "completion"
    QUANTUM_EXPIRY = "quantum_expiry"


@dataclass(order=True)
class Event:
    time: float
    seq: int
    type: EventType = field(compare=False)
    process: Process = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
