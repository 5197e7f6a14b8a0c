from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Process:
    id: int
    label: str
    arrival_time: int
    burst_time: int
    priority: int = 0


class SegmentKind(str, Enum):
    IDLE = "IDLE"
    PROCESS = "PROCESS"


@dataclass(frozen=True)
class ScheduleSegment:
    """
    One contiguous stretch of the timeline: either a process running or the
    CPU sitting idle.
    """

    kind: SegmentKind
    start: int
    end: int
    process: Optional[Process] = None

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def is_idle(self) -> bool:
        return self.kind is SegmentKind.IDLE

    @property
    def label(self) -> str:
        return "idle" if self.process is None else self.process.label


@dataclass(frozen=True)
class CompletionRecord:
    process: Process
    completion_time: int

    @property
    def pid(self) -> int:
        return self.process.id

    @property
    def label(self) -> str:
        return self.process.label

    @property
    def turnaround_time(self) -> int:
        return self.completion_time - self.process.arrival_time

    @property
    def waiting_time(self) -> int:
        return self.turnaround_time - self.process.burst_time


@dataclass
class SimulationResult:
    algorithm: str
    quantum: Optional[int] = None
    schedule: List[ScheduleSegment] = field(default_factory=list)
    # Keyed by process id, in completion order.
    completed: Dict[int, CompletionRecord] = field(default_factory=dict)
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    cpu_utilization: float = 0.0
    total_duration: int = 0
    busy_time: int = 0

    @property
    def process_segments(self) -> List[ScheduleSegment]:
        return [s for s in self.schedule if not s.is_idle]
