"""
Defaults shared by the CLI and the workload helpers.
"""

from __future__ import annotations

DEFAULT_QUANTUM = 2
DEFAULT_STEP_DELAY = 0.3

DEFAULT_ALGORITHMS = ("fcfs", "sjf", "priority", "rr")

# Bounds used by generate_random_workload (inclusive).
RANDOM_COUNT = 5
RANDOM_ARRIVAL_RANGE = (0, 4)
RANDOM_BURST_RANGE = (1, 8)
RANDOM_PRIORITY_RANGE = (1, 5)
