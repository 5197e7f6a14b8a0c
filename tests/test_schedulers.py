import itertools
import logging

import pytest

from schedsim.algorithms import (
    Algorithm,
    compare_algorithms,
    run_algorithm,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
)
from schedsim.errors import InvalidQuantumError, UnknownAlgorithmError
from schedsim.metrics import verify_result
from schedsim.models import Process, SegmentKind


def _procs():
    return [
        Process(1, "P1", arrival_time=0, burst_time=4, priority=1),
        Process(2, "P2", arrival_time=1, burst_time=3, priority=2),
        Process(3, "P3", arrival_time=2, burst_time=1, priority=3),
    ]


def _gappy():
    return [
        Process(1, "A", arrival_time=2, burst_time=3, priority=2),
        Process(2, "B", arrival_time=3, burst_time=1, priority=1),
        Process(3, "C", arrival_time=9, burst_time=2, priority=5),
        Process(4, "D", arrival_time=10, burst_time=6, priority=0),
        Process(5, "E", arrival_time=10, burst_time=1, priority=4),
    ]


def _spans(result):
    return [(s.label, s.start, s.end) for s in result.schedule]


def test_fcfs_scenario():
    res = schedule_fcfs(_procs())
    assert _spans(res) == [("P1", 0, 4), ("P2", 4, 7), ("P3", 7, 8)]
    assert [res.completed[i].waiting_time for i in (1, 2, 3)] == [0, 3, 5]
    assert res.avg_waiting_time == 2.67
    assert res.cpu_utilization == 100.0
    assert res.total_duration == 8


def test_fcfs_inserts_idle_gaps():
    res = schedule_fcfs(_gappy())
    assert res.schedule[0].kind is SegmentKind.IDLE
    assert (res.schedule[0].start, res.schedule[0].end) == (0, 2)
    assert _spans(res)[1:4] == [("A", 2, 5), ("B", 5, 6), ("idle", 6, 9)]
    assert res.busy_time == 13
    assert res.cpu_utilization == round(13 / res.total_duration * 100, 2)


def test_fcfs_ignores_input_order_except_ties():
    baseline = _spans(schedule_fcfs(_procs()))
    for perm in itertools.permutations(_procs()):
        assert _spans(schedule_fcfs(list(perm))) == baseline


def test_fcfs_ties_keep_input_order():
    procs = [Process(1, "X", 0, 2), Process(2, "Y", 0, 2)]
    assert [s.label for s in schedule_fcfs(procs).schedule] == ["X", "Y"]
    assert [s.label for s in schedule_fcfs(procs[::-1]).schedule] == ["Y", "X"]


def test_sjf_picks_shortest_ready_job():
    procs = [
        Process(1, "P1", 0, 6),
        Process(2, "P2", 1, 8),
        Process(3, "P3", 2, 7),
        Process(4, "P4", 3, 3),
    ]
    res = schedule_sjf(procs)
    assert _spans(res) == [("P1", 0, 6), ("P4", 6, 9), ("P3", 9, 16), ("P2", 16, 24)]
    assert res.avg_waiting_time == 6.25


def test_sjf_does_not_preempt():
    procs = [Process(1, "long", 0, 10), Process(2, "short", 1, 1)]
    res = schedule_sjf(procs)
    assert _spans(res) == [("long", 0, 10), ("short", 10, 11)]


def test_sjf_ties_break_on_arrival_then_input_order():
    procs = [
        Process(1, "late", 1, 2),
        Process(2, "first", 0, 5),
        Process(3, "early", 0, 2),
        Process(4, "early2", 0, 2),
    ]
    res = schedule_sjf(procs)
    assert [s.label for s in res.schedule] == ["early", "early2", "late", "first"]

    twins = [Process(1, "A", 0, 3), Process(2, "B", 0, 3)]
    for _ in range(5):
        assert [s.label for s in schedule_sjf(twins).schedule] == ["A", "B"]


def test_priority_order():
    res = schedule_priority(_procs())
    # P1 starts alone at t=0, then P2 beats P3 on priority.
    assert [s.label for s in res.schedule] == ["P1", "P2", "P3"]

    procs = [
        Process(1, "P1", 0, 3, priority=3),
        Process(2, "P2", 1, 2, priority=1),
        Process(3, "P3", 1, 4, priority=2),
    ]
    res = schedule_priority(procs)
    assert _spans(res) == [("P1", 0, 3), ("P2", 3, 5), ("P3", 5, 9)]


def test_priority_does_not_preempt_and_ties_use_input_order():
    procs = [
        Process(1, "low", 0, 5, priority=9),
        Process(2, "urgent", 1, 1, priority=0),
        Process(3, "tieA", 1, 1, priority=0),
    ]
    res = schedule_priority(procs)
    assert _spans(res) == [("low", 0, 5), ("urgent", 5, 6), ("tieA", 6, 7)]


@pytest.mark.parametrize("func", [schedule_sjf, schedule_priority])
def test_non_preemptive_runs_are_single_contiguous_segments(func):
    res = func(_gappy())
    process_segments = res.process_segments
    assert len(process_segments) == len(_gappy())
    for seg in process_segments:
        assert seg.start >= seg.process.arrival_time
        assert seg.duration == seg.process.burst_time


def test_rr_scenario_quantum_2():
    res = schedule_rr(_procs(), quantum=2)
    assert _spans(res) == [
        ("P1", 0, 2),
        ("P2", 2, 4),
        ("P3", 4, 5),
        ("P1", 5, 7),
        ("P2", 7, 8),
    ]
    assert {i: r.completion_time for i, r in res.completed.items()} == {1: 7, 2: 8, 3: 5}
    assert res.quantum == 2


def test_rr_new_arrivals_queue_ahead_of_preempted_process():
    procs = [Process(1, "A", 0, 3), Process(2, "B", 1, 2)]
    res = schedule_rr(procs, quantum=1)
    # B arrives at t=1, exactly when A is preempted: B goes first.
    assert _spans(res) == [("A", 0, 1), ("B", 1, 2), ("A", 2, 3), ("B", 3, 4), ("A", 4, 5)]


def test_rr_mid_slice_arrivals_queue_by_arrival_time():
    procs = [Process(1, "A", 0, 5), Process(2, "C", 2, 1), Process(3, "B", 1, 1)]
    res = schedule_rr(procs, quantum=3)
    assert _spans(res) == [("A", 0, 3), ("B", 3, 4), ("C", 4, 5), ("A", 5, 7)]


def test_rr_simultaneous_arrivals_keep_input_order():
    procs = [
        Process(1, "A", 0, 4),
        Process(2, "Y", 2, 1),
        Process(3, "X", 2, 1),
        Process(4, "W", 1, 2),
    ]
    res = schedule_rr(procs, quantum=3)
    assert _spans(res) == [("A", 0, 3), ("W", 3, 5), ("Y", 5, 6), ("X", 6, 7), ("A", 7, 8)]


def test_rr_idles_until_next_arrival():
    res = schedule_rr(_gappy(), quantum=2)
    assert _spans(res)[0] == ("idle", 0, 2)
    idle = [s for s in res.schedule if s.is_idle]
    assert [(s.start, s.end) for s in idle] == [(0, 2), (6, 9)]


@pytest.mark.parametrize("quantum", [1, 2, 3, 100])
def test_rr_slices_respect_quantum_and_sum_to_burst(quantum):
    procs = _gappy()
    res = schedule_rr(procs, quantum=quantum)
    for p in procs:
        slices = [s for s in res.process_segments if s.process.id == p.id]
        assert sum(s.duration for s in slices) == p.burst_time
        assert all(s.duration <= quantum for s in slices)


@pytest.mark.parametrize("quantum", [0, -1, None])
def test_rr_rejects_non_positive_quantum(quantum):
    with pytest.raises(InvalidQuantumError):
        schedule_rr(_procs(), quantum=quantum)


@pytest.mark.parametrize("algorithm", list(Algorithm))
@pytest.mark.parametrize("procs", [_procs(), _gappy()])
def test_invariants_hold_for_every_policy(algorithm, procs):
    res = run_algorithm(algorithm, procs, quantum=2)
    verify_result(res, procs)
    assert sum(s.duration for s in res.schedule) == res.total_duration
    for p in procs:
        record = res.completed[p.id]
        assert record.completion_time > p.arrival_time
        assert record.waiting_time >= 0
        assert record.turnaround_time == record.waiting_time + p.burst_time


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_empty_process_set(algorithm):
    res = run_algorithm(algorithm, [], quantum=2)
    assert res.schedule == []
    assert res.completed == {}
    assert res.total_duration == 0
    assert res.avg_waiting_time == 0
    assert res.avg_turnaround_time == 0
    assert res.cpu_utilization == 0


def test_caller_processes_are_not_mutated():
    procs = _procs()
    snapshot = list(procs)
    schedule_rr(procs, quantum=1)
    schedule_sjf(procs)
    assert procs == snapshot


def test_run_algorithm_dispatch():
    assert run_algorithm("FCFS", _procs()).algorithm.startswith("First Come")
    assert run_algorithm("rr", _procs(), quantum=3).quantum == 3
    # Quantum is dropped for the non-preemptive policies.
    assert run_algorithm("sjf", _procs(), quantum=3).quantum is None
    with pytest.raises(UnknownAlgorithmError):
        run_algorithm("srtf", _procs())


def test_compare_algorithms_keeps_requested_order():
    results = compare_algorithms(_procs(), 2, ["rr", "fcfs"])
    assert [r.quantum for r in results] == [2, None]
    assert results[1].avg_waiting_time == 2.67


def test_engine_debug_log_is_formatted_lazily(caplog):
    with caplog.at_level(logging.DEBUG, logger="schedsim.simulation"):
        schedule_fcfs([Process(1, "A", 1, 2)])
    messages = [r.getMessage() for r in caplog.records if r.name == "schedsim.simulation"]
    assert messages == ["t=0-1: idle", "t=1-3: run A", "A done at t=3 (turnaround=2, waiting=0)"]
    assert all(r.args for r in caplog.records if r.name == "schedsim.simulation")
