"""
Discrete-event CPU scheduling simulator.

Models Preemptive Shortest-Job-First and Round-Robin scheduling over a
stream of arriving processes and reports CPU utilization, waiting time and
turnaround time as a function of the arrival rate.
"""

from .clock import SimulationClock
from .metrics import MetricsAccumulator, RunSummary
from .models import Process
from .ready_queue import ReadyQueue, SchedulingPolicy, create_ready_queue
from .simulator import Simulation, SimulationConfig, run_simulation

__all__ = [
    "MetricsAccumulator",
    "Process",
    "ReadyQueue",
    "RunSummary",
    "SchedulingPolicy",
    "Simulation",
    "SimulationClock",
    "SimulationConfig",
    "create_ready_queue",
    "run_simulation",
    "cli",
]
