from __future__ import annotations

from typing import Dict, List, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice


def _merge_adjacent(slices: List[ScheduledSlice]) -> List[ScheduledSlice]:
    merged: List[ScheduledSlice] = []
    for sl in slices:
        if merged and merged[-1].pid == sl.pid and abs(merged[-1].end_time - sl.start_time) < 1e-12:
            merged[-1] = ScheduledSlice(pid=sl.pid, start_time=merged[-1].start_time, end_time=sl.end_time)
        else:
            merged.append(sl)
    return merged


def build_rich_gantt(slices: List[ScheduledSlice], scale: Optional[float] = None) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    ``scale`` is the number of characters per simulated time unit; by default
    the chart is sized so the shortest slice gets about four characters.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = _merge_adjacent(sorted(slices, key=lambda s: (s.start_time, s.end_time)))

    if scale is None:
        shortest = min(sl.end_time - sl.start_time for sl in slices)
        scale = 4 / shortest if shortest > 0 else 1.0

    def columns(t: float) -> int:
        return int(round(t * scale))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = f"{0:g}"
    last_col = 0

    for sl in slices:
        start_col = columns(sl.start_time)
        idle_gap = start_col - last_col
        if idle_gap > 0:
            timeline.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            time_marks += f" {sl.start_time:.3g}"

        width = max(1, columns(sl.end_time) - max(start_col, last_col))
        color = pid_color(sl.pid)

        timeline.append(" " * width, style=f"on {color}")
        labels.append(sl.pid[:width].ljust(width), style="bold")

        last_col = max(start_col, last_col) + width
        time_marks += f" {sl.end_time:.3g}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
