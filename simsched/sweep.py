from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence

from .metrics import RunSummary
from .ready_queue import SchedulingPolicy
from .simulator import SimulationConfig, run_simulation
from .workload import DEFAULT_MEAN_SERVICE_TIME, poisson_processes

logger = logging.getLogger(__name__)


def run_once(
    policy: SchedulingPolicy | str,
    arrival_rate: float,
    *,
    quantum: float = 0.01,
    mean_service_time: float = DEFAULT_MEAN_SERVICE_TIME,
    process_limit: int = 10_000,
    max_time: Optional[float] = None,
    seed: Optional[int] = None,
) -> RunSummary:
    """
    Simulate one policy at one arrival rate on a freshly generated workload.
    """
    config = SimulationConfig(
        policy=policy,
        quantum=quantum,
        process_limit=process_limit,
        max_time=max_time,
    )
    processes = poisson_processes(arrival_rate, mean_service_time, seed=seed)
    return run_simulation(processes, config, arrival_rate=arrival_rate)


def sweep(
    policies: Sequence[SchedulingPolicy | str],
    arrival_rates: Sequence[float],
    *,
    quantum: float = 0.01,
    mean_service_time: float = DEFAULT_MEAN_SERVICE_TIME,
    process_limit: int = 10_000,
    max_time: Optional[float] = None,
    seed: Optional[int] = None,
    workers: Optional[int] = None,
) -> List[RunSummary]:
    """
    Run every policy at every arrival rate, ordered by policy then rate.

    Each run builds its own workload from ``seed``, so a policy sees the same
    arrivals at a given rate no matter how runs are spread over workers.
    With ``workers`` above 1 the runs go to a process pool.
    """
    parsed = [SchedulingPolicy.parse(p) for p in policies]
    if not arrival_rates:
        raise ValueError("At least one arrival rate is required")
    if workers is not None and workers < 1:
        raise ValueError("workers must be at least 1")

    jobs = [(policy, rate) for policy in parsed for rate in arrival_rates]
    options = dict(
        quantum=quantum,
        mean_service_time=mean_service_time,
        process_limit=process_limit,
        max_time=max_time,
        seed=seed,
    )
    logger.info("Sweeping %d runs (%d policies x %d rates)", len(jobs), len(parsed), len(arrival_rates))

    if workers is None or workers == 1:
        return [run_once(policy, rate, **options) for policy, rate in jobs]

    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(run_once, policy, rate, **options) for policy, rate in jobs]
        return [future.result() for future in futures]


def rate_range(start: float, stop: float, step: float) -> List[float]:
    """
    Inclusive range of arrival rates, e.g. ``rate_range(1, 30, 1)``.
    """
    if start <= 0 or step <= 0 or stop < start:
        raise ValueError("rate range must satisfy 0 < start <= stop and step > 0")
    rates = []
    i = 0
    while True:
        rate = start + i * step
        if rate > stop + step * 1e-9:
            return rates
        rates.append(round(rate, 10))
        i += 1
