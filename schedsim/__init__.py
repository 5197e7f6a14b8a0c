"""
CPU scheduling simulator.

Runs FCFS, SJF, Priority and Round Robin over a set of processes and reports
the execution timeline together with waiting, turnaround and utilization
metrics.
"""

from .algorithms import Algorithm, compare_algorithms, run_algorithm, simulate
from .models import CompletionRecord, Process, ScheduleSegment, SegmentKind, SimulationResult

__all__ = [
    "Algorithm",
    "CompletionRecord",
    "Process",
    "ScheduleSegment",
    "SegmentKind",
    "SimulationResult",
    "cli",
    "compare_algorithms",
    "run_algorithm",
    "simulate",
]
