import random

import pytest

from multicore_sched.config import SimulationConfig
from multicore_sched.engine import (
    run_configurations,
    run_simulation,
    simulate,
    standard_configurations,
)
from multicore_sched.models import Policy, PreconditionViolation, Process, ScheduledSlice
from multicore_sched.workload_io import generate_workload, processes_from_workload


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5),
        Process("P2", arrival_time=1, burst_time=3),
        Process("P3", arrival_time=2, burst_time=8),
    ]


def _generated(count=60, seed=42):
    return processes_from_workload(generate_workload(count, random.Random(seed)))


def _finish(run):
    return {p.pid: p.completion_time for p in run.processes}


def test_fcfs_single_core():
    run = run_simulation(_procs(), 1, Policy.FCFS)
    assert [p.waiting_time for p in run.processes] == [0, 4, 6]
    assert _finish(run) == {"P1": 5, "P2": 8, "P3": 16}
    assert run.final_clock == 16
    assert run.context_switches == 6
    assert run.metrics.throughput == 3 / 16
    assert run.metrics.cpu_utilization == 1.0


def test_fcfs_keeps_arrival_order_for_simultaneous_arrivals():
    procs = [Process("P7", 0, 2), Process("P3", 0, 1), Process("P5", 0, 1)]
    run = run_simulation(procs, 1, Policy.FCFS)
    order = [s.pid for s in sorted(run.timeline, key=lambda s: s.start_time)]
    assert order == ["P7", "P3", "P5"]


def test_sjf_np_picks_shortest_ready_job():
    procs = [Process("A", 0, 6), Process("B", 1, 8), Process("C", 2, 3)]
    run = run_simulation(procs, 1, Policy.SJF_NP)
    assert _finish(run) == {"A": 6, "C": 9, "B": 17}
    assert {p.pid: p.waiting_time for p in run.processes} == {"A": 0, "B": 8, "C": 4}


def test_sjf_np_equal_bursts_are_taken_in_arrival_order():
    procs = [Process("A", 0, 4), Process("Z", 1, 2), Process("B", 2, 2)]
    run = run_simulation(procs, 1, Policy.SJF_NP)
    assert _finish(run) == {"A": 4, "Z": 6, "B": 8}


def test_sjf_np_never_preempts():
    procs = _generated()
    for cores in (1, 4):
        run = run_simulation(procs, cores, Policy.SJF_NP)
        # one dispatch and one completion per process
        assert run.context_switches == 2 * len(procs)
        assert len(run.timeline) == len(procs)


def test_srtf_preempts_longer_job():
    procs = [Process("A", 0, 10), Process("B", 3, 2)]
    run = run_simulation(procs, 1, Policy.SJF_P)
    assert _finish(run) == {"A": 12, "B": 5}
    assert run.timeline == [
        ScheduledSlice(0, "A", 0, 3),
        ScheduledSlice(0, "B", 3, 5),
        ScheduledSlice(0, "A", 5, 12),
    ]
    # dispatch A, preempt A, dispatch B, finish B, dispatch A, finish A
    assert run.context_switches == 6
    assert {p.pid: p.waiting_time for p in run.processes} == {"A": 2, "B": 0}


def test_srtf_equal_remaining_does_not_preempt():
    procs = [Process("A", 0, 5), Process("B", 2, 3)]
    run = run_simulation(procs, 1, Policy.SJF_P)
    assert _finish(run) == {"A": 5, "B": 8}
    assert run.context_switches == 4


def test_srtf_short_arrival_evicts_every_longer_core():
    procs = [Process("P0", 0, 10), Process("P1", 0, 8), Process("P2", 2, 1)]
    run = run_simulation(procs, 2, Policy.SJF_P)
    assert _finish(run) == {"P0": 11, "P1": 8, "P2": 3}
    # both cores are evicted at tick 2; P1 comes straight back on core 1
    assert sorted(run.timeline, key=lambda s: (s.core, s.start_time)) == [
        ScheduledSlice(0, "P1", 0, 2),
        ScheduledSlice(0, "P2", 2, 3),
        ScheduledSlice(0, "P0", 3, 11),
        ScheduledSlice(1, "P0", 0, 2),
        ScheduledSlice(1, "P1", 2, 8),
    ]
    assert run.context_switches == 10


def test_round_robin_quantum_five():
    procs = [Process("P1", 0, 12), Process("P2", 0, 4)]
    run = run_simulation(procs, 1, Policy.ROUND_ROBIN, quantum=5)
    assert run.timeline == [
        ScheduledSlice(0, "P1", 0, 5),
        ScheduledSlice(0, "P2", 5, 9),
        ScheduledSlice(0, "P1", 9, 14),
        ScheduledSlice(0, "P1", 14, 16),
    ]
    assert _finish(run) == {"P1": 16, "P2": 9}
    assert {p.pid: p.response_time for p in run.processes} == {"P1": 0, "P2": 5}
    # four dispatches, two expiries, two completions
    assert run.context_switches == 8


def test_round_robin_expired_process_goes_behind_waiting_ones():
    procs = [Process("A", 0, 3), Process("B", 1, 1)]
    run = run_simulation(procs, 1, Policy.ROUND_ROBIN, quantum=2)
    assert [(s.pid, s.start_time, s.end_time) for s in run.timeline] == [("A", 0, 2), ("B", 2, 3), ("A", 3, 4)]


def test_cores_fill_in_index_order():
    procs = [Process("A", 0, 3), Process("B", 0, 3), Process("C", 0, 3)]
    run = run_simulation(procs, 2, Policy.FCFS)
    cores = {s.pid: s.core for s in run.timeline}
    assert cores == {"A": 0, "B": 1, "C": 0}
    assert _finish(run) == {"A": 3, "B": 3, "C": 6}


def test_idle_cores_are_not_counted_busy_with_staggered_arrivals():
    procs = [Process("A", 0, 4), Process("B", 2, 1), Process("C", 10, 2)]
    run = run_simulation(procs, 2, Policy.FCFS)
    assert _finish(run) == {"A": 4, "B": 3, "C": 12}
    assert run.busy_ticks == 7
    assert run.final_clock == 12
    assert run.metrics.cpu_utilization == 7 / 24
    assert run.metrics.throughput == 3 / 12


def test_clock_jumps_to_first_arrival():
    run = run_simulation([Process("A", 50, 5)], 1, Policy.FCFS)
    assert run.processes[0].start_time == 50
    assert run.final_clock == 55
    assert run.metrics.cpu_utilization == 5 / 55


@pytest.mark.parametrize("label,policy,quantum", standard_configurations((10, 5, 20)))
def test_every_configuration_completes_consistently(label, policy, quantum):
    procs = _generated()
    run = run_simulation(procs, 4, policy, quantum)

    assert len(run.processes) == len(procs)
    assert all(p.completion_time is not None for p in run.processes)
    assert all(p.waiting_time >= 0 for p in run.processes)
    assert all(p.response_time >= 0 for p in run.processes)
    assert run.busy_ticks == sum(p.burst_time for p in procs)
    assert sum(s.end_time - s.start_time for s in run.timeline) == run.busy_ticks
    assert run.final_clock == max(p.completion_time for p in run.processes)
    assert 0.0 <= run.metrics.cpu_utilization <= 1.0
    assert run.metrics.throughput > 0
    assert 0.0 < run.metrics.fairness <= 1.0


def test_repeated_runs_are_identical():
    procs = _generated(count=80, seed=7)
    config = SimulationConfig(core_count=3)
    assert run_configurations(procs, config) == run_configurations(list(procs), config)


def test_simulate_returns_metrics():
    m = simulate(_procs(), 1, Policy.FCFS)
    assert m.avg_waiting == pytest.approx(10 / 3)
    assert m.avg_turnaround == pytest.approx((5 + 7 + 14) / 3)
    assert m.avg_response == pytest.approx(10 / 3)
    assert m.context_switches == 6


def test_run_configurations_labels():
    results = run_configurations(_procs(), SimulationConfig(core_count=2))
    assert [r.label for r in results] == ["FCFS", "SJF-NP", "SJF-P", "RR_Q10ms", "RR_Q5ms", "RR_Q20ms"]


@pytest.mark.parametrize(
    "procs,cores,policy,quantum",
    [
        ([], 1, Policy.FCFS, None),
        (_procs(), 0, Policy.FCFS, None),
        (_procs(), 1, Policy.ROUND_ROBIN, 0),
        (_procs(), 1, Policy.ROUND_ROBIN, None),
        ([Process("A", 5, 1), Process("B", 2, 1)], 1, Policy.FCFS, None),
        ([Process("A", 0, 0)], 1, Policy.FCFS, None),
        ([Process("A", -1, 3)], 1, Policy.FCFS, None),
        ([Process("A", 0, 1), Process("A", 1, 1)], 1, Policy.FCFS, None),
    ],
)
def test_precondition_violations(procs, cores, policy, quantum):
    with pytest.raises(PreconditionViolation):
        run_simulation(procs, cores, policy, quantum)


def test_quantum_ignored_outside_round_robin():
    run = run_simulation(_procs(), 1, Policy.FCFS, quantum=0)
    assert run.quantum is None


def test_policy_parse_aliases():
    assert Policy.parse("SJF") is Policy.SJF_NP
    assert Policy.parse("srtf") is Policy.SJF_P
    assert Policy.parse(" round-robin ") is Policy.ROUND_ROBIN
    with pytest.raises(ValueError):
        Policy.parse("mlfq")
