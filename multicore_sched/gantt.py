from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice


def _by_core(slices: List[ScheduledSlice]) -> Dict[int, List[ScheduledSlice]]:
    rows: Dict[int, List[ScheduledSlice]] = defaultdict(list)
    for sl in sorted(slices, key=lambda s: (s.core, s.start_time, s.end_time)):
        rows[sl.core].append(sl)
    return rows


def render_gantt(slices: List[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart, one row per core. ``.`` marks idle ticks.
    """
    if not slices:
        return "(no execution)"

    lines = ["Gantt Chart:"]
    for core, row in sorted(_by_core(slices).items()):
        line = f"C{core} |"
        last_time = 0
        for sl in row:
            idle_gap = sl.start_time - last_time
            if idle_gap > 0:
                line += "." * idle_gap
            width = max(1, sl.end_time - sl.start_time)
            line += sl.pid[:width].ljust(width, "=")
            last_time = sl.end_time
        lines.append(line + "|")

    return "\n".join(lines)


def build_rich_gantt(slices: List[ScheduledSlice], width: int = 100) -> tuple[Panel, str]:
    """
    Build a Rich Panel with one colored row per core and a string of time marks.

    Long runs are scaled down so the chart fits in ``width`` columns.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    makespan = max(s.end_time for s in slices)
    scale = max(1, -(-makespan // width))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    table = Table.grid(padding=(0, 1))
    for core, row in sorted(_by_core(slices).items()):
        timeline = Text()
        cursor = 0
        for sl in row:
            start = max(cursor, sl.start_time // scale)
            end = sl.end_time // scale
            if end <= start:
                # Narrower than one scaled column; not drawn.
                continue
            if start > cursor:
                timeline.append(" " * (start - cursor))
            label = sl.pid[: end - start].ljust(end - start)
            timeline.append(label, style=f"bold on {pid_color(sl.pid)}")
            cursor = end
        table.add_row(Text(f"C{core}", style="bold"), timeline)

    time_marks = f"0 .. {makespan}" + (f" (1 column = {scale} ticks)" if scale > 1 else "")
    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
