from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import SchedulerError
from .models import CompletionRecord, Process, SimulationResult


def compute_metrics(result: SimulationResult) -> SimulationResult:
    """
    Fill in the aggregate metrics of a finished simulation.

    Averages are taken over completed processes and utilization over the whole
    timeline; everything is rounded to 2 decimals and reported as 0 when there
    is nothing to average over.
    """
    result.total_duration = result.schedule[-1].end if result.schedule else 0
    result.busy_time = sum(s.duration for s in result.process_segments)

    summary = summarize_records(list(result.completed.values()))
    result.avg_waiting_time = summary["avg_waiting"]
    result.avg_turnaround_time = summary["avg_turnaround"]

    if result.total_duration > 0:
        result.cpu_utilization = round(result.busy_time / result.total_duration * 100, 2)
    else:
        result.cpu_utilization = 0.0

    return result


def summarize_records(records: List[CompletionRecord]) -> Dict[str, float]:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not records:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(records)
    return {
        "avg_waiting": round(sum(r.waiting_time for r in records) / n, 2),
        "avg_turnaround": round(sum(r.turnaround_time for r in records) / n, 2),
    }


def verify_result(result: SimulationResult, processes: Sequence[Process]) -> None:
    """
    Raise SchedulerError if the result breaks the timeline or completion
    invariants. A failure here always means an engine defect.
    """
    clock = 0
    for segment in result.schedule:
        if segment.start != clock or segment.end <= segment.start:
            raise SchedulerError(f"Segment {segment} does not continue the timeline at t={clock}")
        clock = segment.end

    if clock != result.total_duration:
        raise SchedulerError(f"Schedule ends at {clock}, expected {result.total_duration}")

    if set(result.completed) != {p.id for p in processes}:
        raise SchedulerError("Completed records do not match the input processes")

    for record in result.completed.values():
        if record.waiting_time < 0 or record.turnaround_time < record.process.burst_time:
            raise SchedulerError(f"Impossible metrics for {record.label}: {record}")
