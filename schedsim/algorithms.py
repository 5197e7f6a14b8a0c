from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import InvalidQuantumError, UnknownAlgorithmError
from .metrics import compute_metrics
from .models import Process, SimulationResult
from .simulation import SimulationClock

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    PRIORITY = "priority"
    RR = "rr"


DISPLAY_NAMES = {
    Algorithm.FCFS: "First Come First Serve (FCFS)",
    Algorithm.SJF: "Shortest Job First (SJF, non-preemptive)",
    Algorithm.PRIORITY: "Priority (non-preemptive)",
    Algorithm.RR: "Round Robin (RR)",
}


def _finish(algorithm: Algorithm, clock: SimulationClock, quantum: Optional[int] = None) -> SimulationResult:
    result = SimulationResult(
        algorithm=DISPLAY_NAMES[algorithm],
        quantum=quantum,
        schedule=clock.schedule,
        completed=clock.completed,
    )
    return compute_metrics(result)


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> SimulationResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    # sorted() is stable, so equal arrivals keep their input order.
    processes_sorted = sorted(processes, key=lambda p: p.arrival_time)

    clock = SimulationClock()
    for p in processes_sorted:
        if clock.now < p.arrival_time:
            clock.idle_until(p.arrival_time)
        clock.dispatch(p, p.burst_time)
        clock.complete(p)

    return _finish(Algorithm.FCFS, clock)


class _State(Enum):
    SELECTING = "selecting"
    DISPATCHING = "dispatching"
    IDLE = "idle"
    DONE = "done"


SelectionKey = Callable[[Process], Tuple[int, ...]]


def _run_non_preemptive(processes: Sequence[Process], selection_key: SelectionKey) -> SimulationClock:
    """
    Rescan-and-pick loop shared by SJF and Priority.

    Among processes that have arrived and are not completed, the one with the
    smallest selection key runs to completion; remaining ties go to the
    earlier input position. Each pass through IDLE or DISPATCHING moves the
    clock strictly forward, which is what guarantees termination.
    """
    clock = SimulationClock()
    pending: Dict[int, Process] = dict(enumerate(processes))
    chosen: Optional[int] = None
    state = _State.SELECTING if pending else _State.DONE

    while state is not _State.DONE:
        if state is _State.SELECTING:
            ready = [i for i, p in pending.items() if p.arrival_time <= clock.now]
            if not ready:
                state = _State.IDLE
                continue
            chosen = min(ready, key=lambda i: selection_key(pending[i]) + (i,))
            state = _State.DISPATCHING

        elif state is _State.IDLE:
            before = clock.now
            clock.idle_until(clock.next_arrival(pending.values()))
            assert clock.now > before, "idle injection must advance the clock"
            state = _State.SELECTING

        elif state is _State.DISPATCHING:
            assert chosen is not None
            p = pending.pop(chosen)
            before = clock.now
            clock.dispatch(p, p.burst_time)
            clock.complete(p)
            assert clock.now > before, "dispatch must advance the clock"
            chosen = None
            state = _State.SELECTING if pending else _State.DONE

    return clock


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> SimulationResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time (tie-breaker:
    earlier arrival, then input order). A shorter job arriving mid-burst
    waits for the running one to finish.
    """
    clock = _run_non_preemptive(processes, lambda p: (p.burst_time, p.arrival_time))
    return _finish(Algorithm.SJF, clock)


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> SimulationResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by earlier arrival time, then input order.
    """
    clock = _run_non_preemptive(processes, lambda p: (p.priority, p.arrival_time))
    return _finish(Algorithm.PRIORITY, clock)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> SimulationResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive during a slice join the queue before the process
    that was just preempted goes back to the tail.
    """
    if quantum is None or quantum < 1:
        raise InvalidQuantumError(f"Round Robin requires a positive quantum, got {quantum!r}")

    processes = list(processes)
    clock = SimulationClock()

    # Remaining burst per input index; the caller's records are never touched.
    remaining = [p.burst_time for p in processes]
    arrivals: Deque[int] = deque(sorted(range(len(processes)), key=lambda i: processes[i].arrival_time))
    ready: Deque[int] = deque()

    def enqueue_new_arrivals() -> None:
        while arrivals and processes[arrivals[0]].arrival_time <= clock.now:
            ready.append(arrivals.popleft())

    enqueue_new_arrivals()

    while ready or arrivals:
        if not ready:
            clock.idle_until(processes[arrivals[0]].arrival_time)
            enqueue_new_arrivals()

        index = ready.popleft()
        p = processes[index]

        run_time = min(remaining[index], quantum)
        clock.dispatch(p, run_time)
        remaining[index] -= run_time

        # Arrivals first, then the preempted process.
        enqueue_new_arrivals()
        if remaining[index] == 0:
            clock.complete(p)
        else:
            ready.append(index)

    return _finish(Algorithm.RR, clock, quantum=quantum)


ALGORITHMS: Dict[Algorithm, Callable[..., SimulationResult]] = {
    Algorithm.FCFS: schedule_fcfs,
    Algorithm.SJF: schedule_sjf,
    Algorithm.PRIORITY: schedule_priority,
    Algorithm.RR: schedule_rr,
}


def resolve_algorithm(name: Union[str, Algorithm]) -> Algorithm:
    if isinstance(name, Algorithm):
        return name
    try:
        return Algorithm(name.lower())
    except (AttributeError, ValueError):
        raise UnknownAlgorithmError(
            f"Unknown algorithm {name!r} (choose from {', '.join(a.value for a in Algorithm)})"
        ) from None


def run_algorithm(
    name: Union[str, Algorithm],
    processes: Sequence[Process],
    quantum: Optional[int] = None,
) -> SimulationResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin.
    """
    algorithm = resolve_algorithm(name)
    func = ALGORITHMS[algorithm]
    q = quantum if algorithm is Algorithm.RR else None

    logger.info(f"Running {algorithm.value} on {len(processes)} process(es)" + (f", quantum={q}" if q else ""))
    return func(processes, quantum=q)


simulate = run_algorithm


def compare_algorithms(
    processes: Sequence[Process],
    quantum: int,
    names: Iterable[Union[str, Algorithm]] = tuple(Algorithm),
) -> List[SimulationResult]:
    """
    Run several policies on the same workload, in the order given.
    """
    return [run_algorithm(name, processes, quantum=quantum) for name in names]
