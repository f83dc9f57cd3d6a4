from __future__ import annotations


class SimulationClock:
    """
    Current simulated time for a single run.

    The driving loop sets the time from the timestamp of the next event, so
    the clock never advances on its own and performs no validation.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._time = start

    def get_time(self) -> float:
        return self._time

    def set_time(self, t: float) -> None:
        self._time = t

    def __repr__(self) -> str:
        return f"SimulationClock(time={self._time!r})"
