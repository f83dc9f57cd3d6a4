from __future__ import annotations

from random import Random
from typing import Iterator, Optional

from .models import Process

DEFAULT_MEAN_SERVICE_TIME = 0.06


def poisson_processes(
    arrival_rate: float,
    mean_service_time: float = DEFAULT_MEAN_SERVICE_TIME,
    *,
    seed: Optional[int] = None,
    count: Optional[int] = None,
) -> Iterator[Process]:
    """
    Generate processes with exponential inter-arrival times (rate
    ``arrival_rate``) and exponential burst times averaging
    ``mean_service_time``.

    The stream is unbounded unless ``count`` is given; the simulator pulls the
    next process only when the previous one arrives.
    """
    if arrival_rate <= 0:
        raise ValueError("arrival_rate must be strictly positive")
    if mean_service_time <= 0:
        raise ValueError("mean_service_time must be strictly positive")
    if count is not None and count < 0:
        raise ValueError("count cannot be negative")

    rng = Random(seed)
    current_time = 0.0
    i = 0
    while count is None or i < count:
        current_time += rng.expovariate(arrival_rate)
        burst_time = rng.expovariate(1.0 / mean_service_time)
        while burst_time <= 0:
            burst_time = rng.expovariate(1.0 / mean_service_time)
        yield Process(pid=f"P{i}", arrival_time=current_time, burst_time=burst_time)
        i += 1
