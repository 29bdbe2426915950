from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_QUANTA, SimulationConfig
from .engine import run_configurations, run_simulation
from .gantt import build_rich_gantt
from .models import LabeledResult, Policy, Process, SimulationRun
from .report import ChartRenderer, ReportSink, write_results_table
from .workload_io import generate_workload, load_workload, processes_from_workload, save_workload

logger = logging.getLogger(__name__)


def _add_workload_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: generate one).",
    )
    parser.add_argument(
        "--processes",
        "-n",
        type=int,
        default=100,
        help="Number of processes to generate (default: 100).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed for the workload generator (default: 42).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multicore-sched",
        description="Multicore CPU scheduling simulator (FCFS, SJF-NP, SJF-P, RR).",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one policy and show per-process results.")
    run_parser.add_argument(
        "--policy",
        "-p",
        required=True,
        help="Policy to use (fcfs, sjf-np, sjf-p, rr).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=10,
        help="Time quantum for round-robin (default: 10, ignored by other policies).",
    )
    run_parser.add_argument(
        "--cores",
        "-c",
        type=int,
        default=4,
        help="Number of identical cores (default: 4).",
    )
    run_parser.add_argument(
        "--gantt",
        action="store_true",
        help="Show a per-core Gantt chart of the run.",
    )
    _add_workload_args(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run FCFS, SJF-NP, SJF-P and RR per quantum on the same workload.",
    )
    compare_parser.add_argument(
        "--cores",
        "-c",
        type=int,
        default=4,
        help="Number of identical cores (default: 4).",
    )
    compare_parser.add_argument(
        "--quanta",
        "-q",
        type=int,
        nargs="+",
        default=list(DEFAULT_QUANTA),
        help="Round-robin quanta to evaluate (default: 10 5 20).",
    )
    compare_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the results table to this CSV path.",
    )
    compare_parser.add_argument(
        "--charts",
        default=None,
        help="Render one PNG chart per metric into this directory (requires --output).",
    )
    _add_workload_args(compare_parser)

    generate_parser = subparsers.add_parser("generate", help="Write a synthetic workload to a JSON file.")
    generate_parser.add_argument("--output", "-o", required=True, help="Destination JSON path.")
    generate_parser.add_argument("--processes", "-n", type=int, default=100, help="Number of processes (default: 100).")
    generate_parser.add_argument("--seed", type=int, default=42, help="Generator seed (default: 42).")
    generate_parser.add_argument("--max-arrival", type=int, default=1000, help="Latest arrival tick (default: 1000).")
    generate_parser.add_argument("--max-burst", type=int, default=200, help="Longest burst (default: 200).")

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load_processes(args: argparse.Namespace, config: SimulationConfig) -> List[Process]:
    if args.workload:
        return load_workload(Path(args.workload))
    rng = random.Random(config.seed)
    workload = generate_workload(config.process_count, rng, config.max_arrival, config.max_burst)
    return processes_from_workload(workload)


def _print_run(run: SimulationRun, console: Console, show_gantt: bool) -> None:
    console.print(f"[bold]Policy:[/bold] {run.policy.label}")
    console.print(f"[bold]Cores:[/bold] {run.core_count}")
    if run.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {run.quantum}")

    console.print()

    if show_gantt:
        panel, time_marks = build_rich_gantt(run.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)
        console.print()

    headers = ["PID", "Arrive", "Burst", "Start", "Complete", "Wait", "Turnaround", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in run.processes:
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    m = run.metrics
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{m.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{m.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{m.avg_response:.2f}")
    sys_table.add_row("Throughput (proc/tick)", f"{m.throughput:.4f}")
    sys_table.add_row("CPU utilization", f"{m.cpu_utilization*100:.1f}%")
    sys_table.add_row("Context switches", str(m.context_switches))
    sys_table.add_row("Fairness (Jain)", f"{m.fairness:.4f}")
    sys_table.add_row("Makespan", str(run.final_clock))

    console.print(sys_table)


def _print_comparison(results: Sequence[LabeledResult], console: Console, title: str) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    for col in ["Avg waiting", "Avg turnaround", "Throughput", "CPU util", "Avg response", "Switches", "Fairness"]:
        summary_table.add_column(col, justify="right")

    for r in results:
        m = r.metrics
        summary_table.add_row(
            r.label,
            f"{m.avg_waiting:.2f}",
            f"{m.avg_turnaround:.2f}",
            f"{m.throughput:.4f}",
            f"{m.cpu_utilization*100:.1f}%",
            f"{m.avg_response:.2f}",
            str(m.context_switches),
            f"{m.fairness:.4f}",
        )

    console.print(summary_table)


def _command_run(args: argparse.Namespace, console: Console) -> int:
    config = SimulationConfig(process_count=args.processes, core_count=args.cores, seed=args.seed).validate()
    processes = _load_processes(args, config)
    policy = Policy.parse(args.policy)
    quantum = args.quantum if policy is Policy.ROUND_ROBIN else None
    run = run_simulation(processes, config.core_count, policy, quantum)
    _print_run(run, console, show_gantt=args.gantt)
    return 0


def _command_compare(args: argparse.Namespace, console: Console) -> int:
    if args.charts and not args.output:
        console.print("[red]--charts needs --output to know where the results table goes.[/red]")
        return 1

    config = SimulationConfig(
        process_count=args.processes,
        core_count=args.cores,
        quanta=tuple(args.quanta),
        seed=args.seed,
    ).validate()
    processes = _load_processes(args, config)
    results = run_configurations(processes, config)

    source = args.workload or f"{len(processes)} generated processes (seed {config.seed})"
    _print_comparison(results, console, title=f"Algorithm comparison: {source}, {config.core_count} cores")

    if args.output:
        table_path = write_results_table(args.output, results)
        console.print(f"[green]Results written to {table_path}[/green]")
        if args.charts:
            sink: ReportSink = ChartRenderer(args.charts)
            charts = sink.render(table_path)
            for chart in sorted(charts):
                console.print(f"[green]Chart:[/green] {chart}")
    return 0


def _command_generate(args: argparse.Namespace, console: Console) -> int:
    config = SimulationConfig(
        process_count=args.processes,
        seed=args.seed,
        max_arrival=args.max_arrival,
        max_burst=args.max_burst,
    ).validate()
    workload = generate_workload(config.process_count, random.Random(config.seed), config.max_arrival, config.max_burst)
    path = save_workload(args.output, processes_from_workload(workload))
    console.print(f"[green]Workload with {len(workload)} processes written to {path}[/green]")
    return 0


COMMANDS = {
    "run": _command_run,
    "compare": _command_compare,
    "generate": _command_generate,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    console = Console()
    try:
        return COMMANDS[args.command](args, console)
    except (ValueError, OSError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
