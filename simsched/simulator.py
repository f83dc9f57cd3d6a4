from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from .clock import SimulationClock
from .events import EventQueue
from .metrics import MetricsAccumulator, RunSummary, summarize_run
from .models import Event, EventType, Process, ScheduledSlice
from .ready_queue import SchedulingPolicy, create_ready_queue

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    policy: SchedulingPolicy = SchedulingPolicy.PSJF
    quantum: float = 0.01
    process_limit: int = 10_000
    max_time: Optional[float] = None
    record_timeline: bool = False

    def __post_init__(self) -> None:
        self.policy = SchedulingPolicy.parse(self.policy)
        if self.quantum <= 0:
            raise ValueError("quantum must be strictly positive")
        if self.process_limit <= 0:
            raise ValueError("process_limit must be strictly positive")
        if self.max_time is not None and self.max_time <= 0:
            raise ValueError("max_time must be strictly positive when set")


class Simulation:
    """
    Event-driven run of one scheduling policy over a stream of processes.

    Every run owns its clock, ready queue, accumulator and event queue, so
    independent runs never share state. ``processes`` must be ordered by
    arrival time; it is consumed lazily, one arrival ahead.

    The run stops once ``process_limit`` processes have completed, when no
    events are left, or when the next event lies past ``max_time``. Whatever
    is still waiting at that point is folded into the metrics by the ready
    queue's reconciliation.
    """

    def __init__(
        self,
        processes: Iterable[Process],
        config: SimulationConfig | None = None,
        *,
        arrival_rate: Optional[float] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.arrival_rate = arrival_rate
        self.clock = SimulationClock()
        self.accumulator = MetricsAccumulator()
        self.ready_queue = create_ready_queue(self.config.policy, self.accumulator)
        self.events = EventQueue()
        self.timeline: List[ScheduledSlice] = []

        self._source = iter(processes)
        self._last_arrival = 0.0
        self._running: Optional[Process] = None
        self._running_since = 0.0
        self._running_event: Optional[Event] = None
        self._completed = 0
        self._queue_length_area = 0.0
        self._done = False
        self._handlers: Dict[EventType, Callable[[Process], None]] = {
            EventType.ARRIVAL: self._on_arrival,
            EventType.COMPLETION: self._on_completion,
            EventType.QUANTUM_EXPIRY: self._on_quantum_expiry,
        }

    @property
    def now(self) -> float:
        return self.clock.get_time()

    @property
    def running(self) -> Optional[Process]:
        return self._running

    def run(self) -> RunSummary:
        if self._done:
            raise RuntimeError("Simulation.run() can only be called once per instance")
        self._done = True

        policy = self.config.policy
        logger.info(
            "Starting %s run (arrival rate=%s, quantum=%s, process limit=%d)",
            policy.label,
            self.arrival_rate,
            self.config.quantum if policy is SchedulingPolicy.RR else None,
            self.config.process_limit,
        )

        self._schedule_next_arrival()
        max_time = self.config.max_time
        while self._completed < self.config.process_limit:
            next_time = self.events.peek_time()
            if next_time is None:
                break
            if max_time is not None and next_time > max_time:
                self._advance(max_time)
                break
            event = self.events.pop()
            self._advance(event.time)
            self._handlers[event.type](event.process)

        final_time = self.now
        self._finish(final_time)

        summary = summarize_run(
            self.accumulator,
            policy=policy.label,
            final_time=final_time,
            processes_completed=self._completed,
            arrival_rate=self.arrival_rate,
            quantum=self.config.quantum if policy is SchedulingPolicy.RR else None,
            queue_length_area=self._queue_length_area,
        )
        logger.info(
            "Finished %s run at t=%.4f: %d completed, %d handled, utilization %.3f",
            policy.label,
            final_time,
            summary.processes_completed,
            summary.processes_handled,
            summary.cpu_utilization,
        )
        return summary

    def _advance(self, t: float) -> None:
        self._queue_length_area += len(self.ready_queue) * (t - self.now)
        self.clock.set_time(t)

    def _schedule_next_arrival(self) -> None:
        process = next(self._source, None)
        if process is None:
            return
        if process.arrival_time < self._last_arrival:
            raise ValueError(
                f"Processes must be ordered by arrival time ({process.pid} arrives at "
                f"{process.arrival_time} after {self._last_arrival})"
            )
        self._last_arrival = process.arrival_time
        self.events.schedule(process.arrival_time, EventType.ARRIVAL, process)

    def _on_arrival(self, process: Process) -> None:
        self._schedule_next_arrival()

        if self._running is None:
            self.ready_queue.insert(process)
            self._dispatch()
            return

        if self.config.policy is SchedulingPolicy.PSJF:
            running_remaining = self._running.remaining_cpu_time - (self.now - self._running_since)
            if process.remaining_cpu_time < running_remaining:
                logger.debug(
                    "t=%.4f: %s preempts %s (%.4f < %.4f)",
                    self.now,
                    process.pid,
                    self._running.pid,
                    process.remaining_cpu_time,
                    running_remaining,
                )
                self._requeue_running()
                self.ready_queue.insert(process)
                self._dispatch()
                return

        self.ready_queue.insert(process)

    def _on_completion(self, process: Process) -> None:
        self._charge_running()
        process.remaining_cpu_time = 0.0
        process.completion_time = self.now
        process.turnaround_time = process.completion_time - process.arrival_time
        process.waiting_time = process.turnaround_time - process.burst_time
        self.accumulator.record_completion(process)
        self._completed += 1
        self._running = None
        self._running_event = None

        if self._completed < self.config.process_limit:
            self._dispatch()

    def _on_quantum_expiry(self, process: Process) -> None:
        self._running_event = None
        self._requeue_running()
        self._dispatch()

    def _dispatch(self) -> None:
        process = self.ready_queue.remove_head()
        if process is None:
            return

        if process.start_time is None:
            process.start_time = self.now
        self._running = process
        self._running_since = self.now

        remaining = process.remaining_cpu_time
        if self.config.policy is SchedulingPolicy.RR and remaining > self.config.quantum:
            self._running_event = self.events.schedule(
                self.now + self.config.quantum, EventType.QUANTUM_EXPIRY, process
            )
        else:
            self._running_event = self.events.schedule(
                self.now + remaining, EventType.COMPLETION, process
            )
        logger.debug("t=%.4f: dispatch %s (remaining %.4f)", self.now, process.pid, remaining)

    def _charge_running(self) -> float:
        """
        Deduct the service given to the running process since its dispatch.
        """
        process = self._running
        elapsed = self.now - self._running_since
        if elapsed > 0:
            process.remaining_cpu_time = max(0.0, process.remaining_cpu_time - elapsed)
            if self.config.record_timeline:
                self.timeline.append(
                    ScheduledSlice(pid=process.pid, start_time=self._running_since, end_time=self.now)
                )
        self._running_since = self.now
        return elapsed

    def _requeue_running(self) -> None:
        process = self._running
        if self._charge_running() > 0:
            process.is_returning = True
        if self._running_event is not None:
            self.events.cancel(self._running_event)
            self._running_event = None
        self._running = None
        self.ready_queue.insert(process)

    def _finish(self, final_time: float) -> None:
        if self._running is not None:
            self._requeue_running()
        pending = len(self.ready_queue)
        self.ready_queue.reconcile_at_end(final_time)
        if pending:
            logger.debug("Reconciled %d pending processes at t=%.4f", pending, final_time)


def run_simulation(
    processes: Iterable[Process],
    config: SimulationConfig | None = None,
    *,
    arrival_rate: Optional[float] = None,
) -> RunSummary:
    return Simulation(processes, config, arrival_rate=arrival_rate).run()
