from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .errors import SchedulerError
from .models import CompletionRecord, Process, ScheduleSegment, SegmentKind

logger = logging.getLogger(__name__)


class SimulationClock:
    """
    Clock and timeline shared by every policy.

    The clock only moves forward, either by running a process for a bounded
    duration or by idling up to the next arrival. Every move appends one
    segment, so the emitted schedule always covers [0, now) without gaps.
    """

    def __init__(self) -> None:
        self.now = 0
        self.schedule: List[ScheduleSegment] = []
        self.completed: Dict[int, CompletionRecord] = {}

    def dispatch(self, process: Process, duration: int) -> ScheduleSegment:
        if duration <= 0:
            raise SchedulerError(f"Cannot dispatch {process.label} for {duration} time units")

        segment = ScheduleSegment(
            kind=SegmentKind.PROCESS,
            start=self.now,
            end=self.now + duration,
            process=process,
        )
        self.schedule.append(segment)
        self.now = segment.end
        logger.debug("t=%d-%d: run %s", segment.start, segment.end, process.label)
        return segment

    def idle_until(self, time: int) -> None:
        if time < self.now:
            raise SchedulerError(f"Clock cannot move backwards from {self.now} to {time}")
        if time == self.now:
            return

        self.schedule.append(ScheduleSegment(kind=SegmentKind.IDLE, start=self.now, end=time))
        logger.debug("t=%d-%d: idle", self.now, time)
        self.now = time

    def complete(self, process: Process) -> CompletionRecord:
        record = CompletionRecord(process=process, completion_time=self.now)
        self.completed[process.id] = record
        logger.debug(
            "%s done at t=%d (turnaround=%d, waiting=%d)",
            process.label,
            self.now,
            record.turnaround_time,
            record.waiting_time,
        )
        return record

    @staticmethod
    def next_arrival(pending: Iterable[Process]) -> int:
        return min(p.arrival_time for p in pending)
