from __future__ import annotations

import zlib
from typing import Sequence, Tuple

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Process, SimulationResult

COLORS = ["red", "blue", "green", "yellow", "magenta", "cyan", "bright_red", "bright_blue", "bright_green", "bright_magenta"]


def label_color(label: str) -> str:
    """
    Stable colour for a process label, the same across runs and algorithms.
    """
    return COLORS[zlib.crc32(label.encode("utf-8")) % len(COLORS)]


def _time_marks(result: SimulationResult, offset: int) -> str:
    """
    Time labels whose last digit sits under the last bar cell of each
    segment. A label that would touch its neighbour moves one column right;
    later labels return to their own column.
    """
    marks = ""
    for t in [0] + [seg.end for seg in result.schedule]:
        text = str(t)
        start = max(offset + t - len(text) + 1, 0)
        if marks:
            start = max(start, len(marks) + 1)
        marks = marks.ljust(start) + text
    return marks


def render_gantt(result: SimulationResult) -> str:
    """
    Plain-text Gantt chart: one character per time unit, '.' for idle.
    """
    if not result.schedule:
        return "(no execution)"

    line = "|"
    labels = ""

    for seg in result.schedule:
        width = seg.duration
        if seg.is_idle:
            line += "." * width
            labels += " " * width
        else:
            line += "=" * width
            labels += seg.label[:width].ljust(width)

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            " " + labels,
            _time_marks(result, offset=0),
        ]
    )


def build_rich_gantt(result: SimulationResult) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Each segment is as wide as its duration; idle stretches are dimmed.
    """
    if not result.schedule:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    timeline = Text()
    labels = Text()

    for seg in result.schedule:
        width = seg.duration
        if seg.is_idle:
            timeline.append("░" * width, style="dim")
            labels.append(" " * width)
        else:
            timeline.append(" " * width, style=f"on {label_color(seg.label)}")
            labels.append(seg.label[:width].ljust(width), style="bold")

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title=f"Gantt Chart ({result.algorithm})")
    # Panel border and padding take two columns before the first bar cell.
    return panel, _time_marks(result, offset=1)


def build_process_table(processes: Sequence[Process], result: SimulationResult) -> Table:
    """
    Per-process metrics table, one row per input process.

    Processes without a completion record show '-' instead of metrics.
    """
    headers = ["ID", "Label", "Arrive", "Burst", "Priority", "Complete", "Turnaround", "Wait"]

    table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"ID", "Label"} else "right"
        table.add_column(h, justify=justify)

    for p in processes:
        record = result.completed.get(p.id)
        if record is None:
            tail = ["-", "-", "-"]
        else:
            tail = [str(record.completion_time), str(record.turnaround_time), str(record.waiting_time)]
        table.add_row(
            str(p.id),
            Text(p.label, style=label_color(p.label)),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            *tail,
        )

    return table
