from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import Process


@dataclass
class MetricsAccumulator:
    """
    Running sums for one simulation run.

    Written only by the completion handler of the driving loop and by the
    ready queue's end-of-run reconciliation; read when the run is summarized.
    """

    serviced_burst_time_sum: float = 0.0
    turnaround_time_sum: float = 0.0
    waiting_time_sum: float = 0.0
    processes_handled: int = 0

    def record_completion(self, process: Process) -> None:
        self.serviced_burst_time_sum += process.burst_time
        self.record_termination(process)

    def record_termination(self, process: Process) -> None:
        """
        Count a process whose turnaround and waiting times are final, without
        touching the serviced time.
        """
        self.turnaround_time_sum += process.turnaround_time
        self.waiting_time_sum += process.waiting_time
        self.processes_handled += 1

    def add_serviced_time(self, amount: float) -> None:
        self.serviced_burst_time_sum += amount

    def utilization(self, final_time: float) -> float:
        return self.serviced_burst_time_sum / final_time if final_time > 0 else 0.0

    def average_waiting_time(self, count: Optional[int] = None) -> float:
        n = self.processes_handled if count is None else count
        return self.waiting_time_sum / n if n > 0 else 0.0

    def average_turnaround_time(self, count: Optional[int] = None) -> float:
        n = self.processes_handled if count is None else count
        return self.turnaround_time_sum / n if n > 0 else 0.0


@dataclass
class RunSummary:
    policy: str
    arrival_rate: Optional[float]
    quantum: Optional[float]
    final_time: float
    processes_completed: int
    processes_handled: int
    cpu_utilization: float
    avg_waiting: float
    avg_turnaround: float
    throughput: float
    avg_ready_queue_length: float


def summarize_run(
    accumulator: MetricsAccumulator,
    *,
    policy: str,
    final_time: float,
    processes_completed: int,
    arrival_rate: Optional[float] = None,
    quantum: Optional[float] = None,
    queue_length_area: float = 0.0,
) -> RunSummary:
    """
    Turn the accumulated sums of a finished run into the reported averages.
    """
    handled = accumulator.processes_handled
    return RunSummary(
        policy=policy,
        arrival_rate=arrival_rate,
        quantum=quantum,
        final_time=final_time,
        processes_completed=processes_completed,
        processes_handled=handled,
        cpu_utilization=accumulator.utilization(final_time),
        avg_waiting=accumulator.average_waiting_time(),
        avg_turnaround=accumulator.average_turnaround_time(),
        throughput=handled / final_time if final_time > 0 else 0.0,
        avg_ready_queue_length=queue_length_area / final_time if final_time > 0 else 0.0,
    )
