from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple

from .models import ScheduleSegment, SimulationResult


def active_segment(schedule: Sequence[ScheduleSegment], tick: int) -> Optional[ScheduleSegment]:
    """
    Return the segment running during the tick that ends at ``tick``
    (start < tick <= end), or None at tick 0 and past the end.
    """
    for segment in schedule:
        if segment.start < tick <= segment.end:
            return segment
    return None


def iter_ticks(result: SimulationResult) -> Iterator[Tuple[int, Optional[ScheduleSegment]]]:
    for tick in range(result.total_duration + 1):
        yield tick, active_segment(result.schedule, tick)
