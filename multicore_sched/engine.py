from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .config import SimulationConfig
from .metrics import compute_run_metrics
from .models import (
    CoreSlot,
    LabeledResult,
    Metrics,
    Policy,
    PreconditionViolation,
    Process,
    ProcessMetrics,
    ProcessRuntimeState,
    ScheduledSlice,
    SimulationRun,
)
from .ready_queue import ReadyContainer

logger = logging.getLogger(__name__)


def _check_preconditions(
    processes: Sequence[Process],
    core_count: int,
    policy: Policy,
    quantum: Optional[int],
) -> None:
    if not processes:
        raise PreconditionViolation("workload is empty")
    if core_count < 1:
        raise PreconditionViolation(f"core count must be positive, got {core_count}")
    if policy is Policy.ROUND_ROBIN and (quantum is None or quantum <= 0):
        raise PreconditionViolation("Round Robin requires a positive quantum")

    seen = set()
    last_arrival = 0
    for p in processes:
        if p.pid in seen:
            raise PreconditionViolation(f"duplicate pid {p.pid!r}")
        seen.add(p.pid)
        if p.arrival_time < 0:
            raise PreconditionViolation(f"process {p.pid!r} has negative arrival {p.arrival_time}")
        if p.burst_time < 1:
            raise PreconditionViolation(f"process {p.pid!r} has non-positive burst {p.burst_time}")
        if p.arrival_time < last_arrival:
            raise PreconditionViolation("processes must be ordered by arrival time")
        last_arrival = p.arrival_time


def run_simulation(
    processes: Sequence[Process],
    core_count: int,
    policy: Policy,
    quantum: Optional[int] = None,
) -> SimulationRun:
    """
    Simulate ``processes`` tick by tick on ``core_count`` identical cores.

    Each tick admits arrivals, applies SRTF preemption, fills idle cores in
    ascending core order, then runs every busy core for one tick. When no core
    did any work the clock jumps straight to the next arrival.

    Dispatch, preemption, completion and quantum expiry each count as one
    context switch.
    """
    processes = list(processes)
    _check_preconditions(processes, core_count, policy, quantum)

    preemptive = policy is Policy.SJF_P
    round_robin = policy is Policy.ROUND_ROBIN
    full_quantum = quantum if round_robin else 0

    state = {p.pid: ProcessRuntimeState(remaining=p.burst_time) for p in processes}
    if policy.shortest_first:
        ready = ReadyContainer(key=lambda pid: state[pid].remaining)
    else:
        ready = ReadyContainer()
    cores = [CoreSlot(quantum_left=full_quantum) for _ in range(core_count)]

    run = SimulationRun(
        policy=policy,
        quantum=quantum if round_robin else None,
        core_count=core_count,
    )
    timeline = run.timeline

    logger.debug(
        "simulating %s: %d processes on %d cores (quantum=%s)",
        policy.label,
        len(processes),
        core_count,
        run.quantum,
    )

    n = len(processes)
    completed = 0
    next_arrival = 0
    clock = 0
    switches = 0
    busy_ticks = 0

    while completed < n:
        while next_arrival < n and processes[next_arrival].arrival_time <= clock:
            ready.insert(processes[next_arrival].pid)
            next_arrival += 1

        if preemptive:
            for idx, core in enumerate(cores):
                if core.idle:
                    continue
                best = ready.peek()
                # Equal remaining never preempts; swapping equals would livelock.
                if best is not None and state[best].remaining < state[core.pid].remaining:
                    timeline.append(ScheduledSlice(idx, core.pid, core.slice_start, clock))
                    ready.insert(core.pid)
                    core.pid = None
                    core.quantum_left = full_quantum
                    switches += 1

        for core in cores:
            if not core.idle or ready.is_empty():
                continue
            pid = ready.take_next()
            core.pid = pid
            core.slice_start = clock
            core.quantum_left = full_quantum
            switches += 1
            if state[pid].first_start is None:
                state[pid].first_start = clock

        worked = False
        for idx, core in enumerate(cores):
            if core.idle:
                continue
            worked = True
            pid = core.pid
            proc_state = state[pid]
            proc_state.remaining -= 1
            busy_ticks += 1

            if proc_state.remaining == 0:
                proc_state.finish = clock + 1
                completed += 1
                timeline.append(ScheduledSlice(idx, pid, core.slice_start, clock + 1))
                core.pid = None
                switches += 1
            elif round_robin:
                core.quantum_left -= 1
                if core.quantum_left == 0:
                    timeline.append(ScheduledSlice(idx, pid, core.slice_start, clock + 1))
                    ready.insert(pid)
                    core.pid = None
                    core.quantum_left = full_quantum
                    switches += 1

        if not worked and next_arrival < n:
            clock = processes[next_arrival].arrival_time
        else:
            clock += 1

    for p in processes:
        proc_state = state[p.pid]
        turnaround = proc_state.finish - p.arrival_time
        run.processes.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                start_time=proc_state.first_start,
                completion_time=proc_state.finish,
                waiting_time=turnaround - p.burst_time,
                turnaround_time=turnaround,
                response_time=proc_state.first_start - p.arrival_time,
            )
        )

    run.context_switches = switches
    run.busy_ticks = busy_ticks
    run.final_clock = clock
    compute_run_metrics(run)

    logger.debug(
        "%s finished at tick %d with %d context switches",
        policy.label,
        clock,
        switches,
    )
    return run


def simulate(
    processes: Sequence[Process],
    core_count: int,
    policy: Policy,
    quantum: Optional[int] = None,
) -> Metrics:
    return run_simulation(processes, core_count, policy, quantum).metrics


def standard_configurations(quanta: Sequence[int]) -> List[Tuple[str, Policy, Optional[int]]]:
    """
    The comparison set: FCFS, both SJF variants, then Round Robin once per quantum.
    """
    configs: List[Tuple[str, Policy, Optional[int]]] = [
        (Policy.FCFS.label, Policy.FCFS, None),
        (Policy.SJF_NP.label, Policy.SJF_NP, None),
        (Policy.SJF_P.label, Policy.SJF_P, None),
    ]
    for q in quanta:
        configs.append((f"RR_Q{q}ms", Policy.ROUND_ROBIN, q))
    return configs


def run_configurations(processes: Sequence[Process], config: SimulationConfig) -> List[LabeledResult]:
    config.validate()
    results: List[LabeledResult] = []
    for label, policy, quantum in standard_configurations(config.quanta):
        metrics = simulate(processes, config.core_count, policy, quantum)
        results.append(LabeledResult(label=label, metrics=metrics))
    return results
