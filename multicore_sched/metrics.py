from __future__ import annotations

from typing import List, Sequence

from .models import Metrics, ProcessMetrics, SimulationRun


def jain_fairness(values: Sequence[float]) -> float:
    """
    Jain's fairness index ``(sum x)^2 / (n * sum x^2)``.

    All-equal values (including all zeros) give 1.0; the zero-square case is
    answered directly instead of dividing 0 by 0.
    """
    if not values:
        return 1.0
    total = 0.0
    total_sq = 0.0
    for v in values:
        total += v
        total_sq += v * v
    if total_sq == 0:
        return 1.0
    return (total * total) / (len(values) * total_sq)


def compute_metrics(
    processes: List[ProcessMetrics],
    core_count: int,
    busy_ticks: int,
    final_clock: int,
    context_switches: int,
) -> Metrics:
    """
    Reduce the per-process facts of a finished run into summary metrics.
    """
    n = len(processes)
    if n == 0:
        return Metrics(0.0, 0.0, 0.0, 0.0, 0.0, context_switches, 1.0)

    summary = summarize_process_metrics(processes)

    # A zero-length run cannot happen with validated input, but keep the
    # ratios defined if it does.
    if final_clock > 0:
        throughput = n / final_clock
        cpu_utilization = busy_ticks / (core_count * final_clock)
    else:
        throughput = 0.0
        cpu_utilization = 0.0

    return Metrics(
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        avg_response=summary["avg_response"],
        context_switches=context_switches,
        fairness=jain_fairness([float(p.waiting_time) for p in processes]),
    )


def compute_run_metrics(run: SimulationRun) -> Metrics:
    metrics = compute_metrics(
        run.processes,
        core_count=run.core_count,
        busy_ticks=run.busy_ticks,
        final_clock=run.final_clock,
        context_switches=run.context_switches,
    )
    run.metrics = metrics
    return metrics


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
